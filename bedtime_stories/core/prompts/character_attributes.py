"""
Vision prompt for turning a child's photo into character attributes.

The model must answer with one ``Key: Value`` line per attribute, choosing
values from closed vocabularies so the resulting description stays stable
across image-generation calls.
"""

from ..gateways.text_completion import image_content_part

HAIRSTYLES = [
    "afro", "afro puffs", "bald", "bangs", "bob", "bowl cut", "box braids",
    "braided crown", "buzz cut", "cornrows", "crew cut", "curly bob",
    "curly short", "curly long", "double buns", "dreadlocks", "faux hawk",
    "fishtail braid", "flat top", "french braid", "half up half down",
    "high ponytail", "layered", "long straight", "long wavy", "low ponytail",
    "messy bun", "mohawk", "pigtails", "pixie cut", "quiff", "shaved sides",
    "short spiky", "short straight", "short wavy", "side part", "side ponytail",
    "single braid", "space buns", "swept back", "top knot", "twin braids",
    "twists", "undercut", "wispy fringe",
]

HAIR_COLORS = [
    "black", "dark brown", "brown", "light brown", "auburn", "red", "ginger",
    "strawberry blonde", "blonde", "platinum blonde", "gray", "white",
]

SKIN_TONES = [
    "very fair", "fair", "light", "light olive", "olive", "medium", "tan",
    "brown", "dark brown", "deep",
]

UPPER_GARMENTS = [
    "t-shirt", "long-sleeve shirt", "polo shirt", "button-up shirt", "sweater",
    "hoodie", "cardigan", "jacket", "dress", "tank top", "blouse", "vest",
]

LOWER_GARMENTS = [
    "jeans", "pants", "shorts", "skirt", "leggings", "overalls", "sweatpants",
    "joggers", "dress",
]

FACIAL_EXPRESSIONS = [
    "smiling", "laughing", "grinning", "curious", "surprised", "calm",
    "thoughtful", "excited", "shy",
]

ACTIONS = [
    "standing", "waving", "running", "jumping", "sitting", "walking",
    "dancing", "reading", "playing", "pointing",
]

# Canonical label shown to the model for each attribute slot
ATTRIBUTE_LABELS = {
    "hairstyle": "Hairstyle",
    "hair_color": "Hair Color",
    "skin_tone": "Skin Tone",
    "accessories": "Accessories",
    "upper_garment": "Upper Garment",
    "lower_garment": "Lower Garment",
    "upper_garment_color": "Upper Garment Color",
    "lower_garment_color": "Lower Garment Color",
    "facial_expression": "Facial Expression",
    "action": "Action",
}

SYSTEM_PROMPT = (
    "You describe children's appearance for a picture book illustrator. "
    "You only report visible features, never identity, and always answer "
    "in the exact format requested."
)


def _options(values: list[str]) -> str:
    return ", ".join(values)


def _instruction() -> str:
    return f"""Look at the child in this photo and describe them using exactly these attributes.
Choose each value from the allowed options where options are given.

Hairstyle: one of [{_options(HAIRSTYLES)}]
Hair Color: one of [{_options(HAIR_COLORS)}]
Skin Tone: one of [{_options(SKIN_TONES)}]
Accessories: visible accessories such as glasses, hat, headband or bow, or "no accessories"
Upper Garment: one of [{_options(UPPER_GARMENTS)}]
Lower Garment: one of [{_options(LOWER_GARMENTS)}]
Upper Garment Color: a simple color name
Lower Garment Color: a simple color name
Facial Expression: one of [{_options(FACIAL_EXPRESSIONS)}]
Action: one of [{_options(ACTIONS)}]

Reply with one line per attribute in the form "Key: Value" and nothing else."""


def build_attribute_messages(photo_bytes: bytes, mime_type: str) -> list[dict]:
    """Build the vision request: instruction text plus the inline photo."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": _instruction()},
                image_content_part(photo_bytes, mime_type),
            ],
        },
    ]
