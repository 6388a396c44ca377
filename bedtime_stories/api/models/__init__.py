"""Pydantic models for API requests and responses."""

from .requests import GenerateStoryRequest
from .responses import ErrorResponse, StoryPageResponse, StoryResponse

__all__ = [
    "GenerateStoryRequest",
    "ErrorResponse",
    "StoryPageResponse",
    "StoryResponse",
]
