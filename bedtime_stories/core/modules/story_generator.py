"""
Module for writing the story text in one completion call.

The reply is returned as opaque text; turning it into pages is the parser's
job, so this module can be swapped for a structured-output variant without
touching anything downstream.
"""

import logging

from ..errors import CompletionError
from ..gateways.text_completion import TextCompletionGateway
from ..prompts.story import build_story_messages

logger = logging.getLogger(__name__)


class StoryTextGenerator:
    """Generate the raw, semi-structured story text."""

    def __init__(
        self,
        gateway: TextCompletionGateway,
        page_count: int = 5,
        temperature: float = 0.7,
        max_tokens: int = 1500,
    ):
        self.gateway = gateway
        self.page_count = page_count
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(
        self,
        child_name: str,
        age: int,
        gender: str,
        character_description: str,
    ) -> str:
        """
        Write a personalized story.

        Raises:
            CompletionError: on gateway failure or an empty reply
        """
        messages = build_story_messages(
            child_name=child_name,
            age=age,
            gender=gender,
            character_description=character_description,
            page_count=self.page_count,
        )

        raw_text = await self.gateway.complete(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if not raw_text or not raw_text.strip():
            raise CompletionError("Story completion returned no content")

        logger.debug(f"Raw story reply ({len(raw_text)} chars)")
        return raw_text
