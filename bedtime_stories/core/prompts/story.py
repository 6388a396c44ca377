"""
Story prompt: one call that returns a titled, multi-page story.

The system message fixes the output contract the parser relies on:

    Title: <title>

    **Page 1**
    Content: <narration>
    Image Prompt: <scene, containing the character description verbatim>
"""

SYSTEM_TEMPLATE = """You are a skilled children's story writer who creates engaging, age-appropriate bedtime stories.

Always answer in exactly this format and nothing else:

Title: <story title>

**Page 1**
Content: <2-4 sentences of story text for this page>
Image Prompt: <one sentence describing the illustration for this page>

...continue with **Page 2** up to **Page {page_count}**.

Rules for every Image Prompt:
- It must contain this character description word for word: "{character_description}"
- Describe the setting, the action and the mood of the page
- Never ask for text, letters or words in the picture"""

USER_TEMPLATE = """Write a {page_count}-page bedtime story that is engaging, imaginative, and comforting for a {age} year old {gender} named {child_name}. The story should:
- Star {child_name} as the main character
- Use simple language a {age} year old can follow
- Have a clear beginning, middle, and happy ending
- Include positive themes like friendship, kindness, or bravery
- Feature magical or whimsical elements
- Use rhythm or repetitive phrases
- End on a soothing note that helps with falling asleep"""


def build_story_messages(
    child_name: str,
    age: int,
    gender: str,
    character_description: str,
    page_count: int,
) -> list[dict]:
    """Build the system + user messages for the story call."""
    return [
        {
            "role": "system",
            "content": SYSTEM_TEMPLATE.format(
                page_count=page_count,
                character_description=character_description,
            ),
        },
        {
            "role": "user",
            "content": USER_TEMPLATE.format(
                page_count=page_count,
                age=age,
                gender=gender,
                child_name=child_name,
            ),
        },
    ]
