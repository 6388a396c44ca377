"""Pydantic models for API responses."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...core.types import ImageStatus, Story, StoryPage


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase for the web client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoryPageResponse(CamelModel):
    """A single illustrated page of the story."""

    page_number: int
    content: str
    image_prompt: str
    image_url: Optional[str] = None
    image_status: ImageStatus = ImageStatus.PENDING

    @classmethod
    def from_page(cls, page: StoryPage) -> "StoryPageResponse":
        return cls(
            page_number=page.page_number,
            content=page.content,
            image_prompt=page.image_prompt,
            image_url=page.image_url,
            image_status=page.image_status,
        )


class StoryResponse(CamelModel):
    """A complete story."""

    title: str
    pages: list[StoryPageResponse]

    @classmethod
    def from_story(cls, story: Story) -> "StoryResponse":
        return cls(
            title=story.title,
            pages=[StoryPageResponse.from_page(page) for page in story.pages],
        )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    code: Optional[str] = None
