"""
Prompt templates for the text-completion calls.

Each module holds the instructions for one call and the helper that turns
request data into role-tagged messages.
"""

from .character_attributes import ATTRIBUTE_LABELS, HAIRSTYLES, build_attribute_messages
from .story import build_story_messages

__all__ = [
    "ATTRIBUTE_LABELS",
    "HAIRSTYLES",
    "build_attribute_messages",
    "build_story_messages",
]
