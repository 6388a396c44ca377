"""
Centralized domain types for the Bedtime Story Generator.

All dataclasses that are used across multiple modules are defined here
to make data flow explicit and avoid circular imports.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional


# =============================================================================
# Character Types
# =============================================================================


# Placeholder values used when the vision reply omits a slot
ATTRIBUTE_DEFAULTS = {
    "hairstyle": "simple hairstyle",
    "hair_color": "brown",
    "skin_tone": "medium",
    "accessories": "no accessories",
    "upper_garment": "t-shirt",
    "lower_garment": "pants",
    "upper_garment_color": "blue",
    "lower_garment_color": "dark blue",
    "facial_expression": "smiling",
    "action": "standing",
}

# Slots without which the character would not be recognisable
CRITICAL_ATTRIBUTES = ("hairstyle", "hair_color", "skin_tone")

CHARACTER_ART_STYLE = "in a soft, colorful children's picture book style"


@dataclass(frozen=True)
class CharacterAttributes:
    """Visual attributes of the child, extracted once from a photo."""

    hairstyle: str = ATTRIBUTE_DEFAULTS["hairstyle"]
    hair_color: str = ATTRIBUTE_DEFAULTS["hair_color"]
    skin_tone: str = ATTRIBUTE_DEFAULTS["skin_tone"]
    accessories: str = ATTRIBUTE_DEFAULTS["accessories"]
    upper_garment: str = ATTRIBUTE_DEFAULTS["upper_garment"]
    lower_garment: str = ATTRIBUTE_DEFAULTS["lower_garment"]
    upper_garment_color: str = ATTRIBUTE_DEFAULTS["upper_garment_color"]
    lower_garment_color: str = ATTRIBUTE_DEFAULTS["lower_garment_color"]
    facial_expression: str = ATTRIBUTE_DEFAULTS["facial_expression"]
    action: str = ATTRIBUTE_DEFAULTS["action"]

    @classmethod
    def slot_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_mapping(cls, values: dict[str, str]) -> "CharacterAttributes":
        """Build from a slot -> value mapping; unknown keys are ignored, empty values defaulted."""
        known = {
            name: value.strip()
            for name, value in values.items()
            if name in ATTRIBUTE_DEFAULTS and value and value.strip()
        }
        return cls(**known)

    def to_description(self) -> str:
        """Format into the single sentence embedded in every image prompt."""
        return (
            f"A child with {self.hair_color} {self.hairstyle} hair and {self.skin_tone} skin, "
            f"wearing a {self.upper_garment_color} {self.upper_garment} and "
            f"{self.lower_garment_color} {self.lower_garment}, with {self.accessories}, "
            f"{self.facial_expression} and {self.action}, {CHARACTER_ART_STYLE}"
        )


def build_fallback_description(child_name: str, age: int, gender: str) -> str:
    """Character description for the text-only flavour, where there is no photo."""
    return f"{child_name}, a cheerful {age}-year-old {gender}, {CHARACTER_ART_STYLE}"


# =============================================================================
# Story Types
# =============================================================================


class ImageStatus(str, Enum):
    """Illustration state of a single page."""

    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class StoryPage:
    """A single page of the story: narration plus the prompt for its picture."""

    page_number: int
    content: str
    image_prompt: str
    image_url: Optional[str] = None
    image_status: ImageStatus = ImageStatus.PENDING


@dataclass
class Story:
    """A parsed story. Page numbers are contiguous starting at 1."""

    title: str
    pages: list[StoryPage] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_formatted_string(self) -> str:
        """Markdown rendering used by the CLI."""
        lines = [f"# {self.title}", ""]
        for page in self.pages:
            lines.append(f"## Page {page.page_number}")
            lines.append("")
            lines.append(page.content)
            lines.append("")
            if page.image_url:
                lines.append(f"![Page {page.page_number}]({page.image_url})")
                lines.append("")
            lines.append(f"*Illustration prompt: {page.image_prompt}*")
            lines.append("")
        return "\n".join(lines)


# =============================================================================
# Request Types
# =============================================================================


@dataclass
class StoryRequest:
    """Personalization inputs for one story."""

    child_name: str
    age: int
    gender: str
    photo: Optional[bytes] = None
    photo_mime_type: Optional[str] = None
