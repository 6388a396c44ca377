"""
Pipeline stages for the Bedtime Story Generator.

Photo-driven workflow:
1. CharacterExtractor - photo -> character description
2. StoryTextGenerator - personalization + description -> raw story text
3. StoryParser - raw story text -> Story
4. PageIllustrator - Story pages -> pages with image URLs
"""

from .character_extractor import CharacterExtractor, parse_attribute_lines
from .page_illustrator import PageIllustrator, enhance_prompt, placeholder_url
from .story_generator import StoryTextGenerator
from .story_parser import DEFAULT_TITLE, StoryParser, parse_story

__all__ = [
    "CharacterExtractor",
    "parse_attribute_lines",
    "PageIllustrator",
    "enhance_prompt",
    "placeholder_url",
    "StoryTextGenerator",
    "DEFAULT_TITLE",
    "StoryParser",
    "parse_story",
]
