"""
Story generation constants and pipeline configuration.

Variation between story flavours (photo-driven vs text-only, page count,
model choice) is expressed here as configuration rather than as separate
code paths.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .image import IMAGE_CONSTANTS

load_dotenv(find_dotenv())

# Story generation constants
STORY_CONSTANTS = {
    "page_count": 5,
    "min_page_count": 1,
    "max_page_count": 12,
    "min_age": 1,
    "default_gender": "child",
    "default_title": "Untitled Story",
    "temperature": 0.7,
    "max_tokens": 1500,
    "vision_temperature": 0.2,
    "vision_max_tokens": 400,
    "request_timeout": 300.0,  # overall deadline for one request (seconds)
}


@dataclass(frozen=True)
class PipelineConfig:
    """Knobs for one story pipeline instance."""

    photo_driven: bool = True
    page_count: int = STORY_CONSTANTS["page_count"]
    model: Optional[str] = None
    temperature: float = STORY_CONSTANTS["temperature"]
    max_tokens: int = STORY_CONSTANTS["max_tokens"]
    illustrate: bool = True
    strict_attributes: bool = False
    poll_interval: float = IMAGE_CONSTANTS["poll_interval"]
    max_poll_attempts: int = IMAGE_CONSTANTS["max_poll_attempts"]
    max_concurrency: Optional[int] = None
    request_timeout: Optional[float] = STORY_CONSTANTS["request_timeout"]
    max_age: Optional[int] = None  # opt-in upper bound on the child's age

    def __post_init__(self):
        if not STORY_CONSTANTS["min_page_count"] <= self.page_count <= STORY_CONSTANTS["max_page_count"]:
            raise ValueError(
                f"page_count must be between {STORY_CONSTANTS['min_page_count']} "
                f"and {STORY_CONSTANTS['max_page_count']}, got {self.page_count}"
            )
        if self.max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        if self.poll_interval < 0:
            raise ValueError("poll_interval cannot be negative")
        if self.max_age is not None and self.max_age < STORY_CONSTANTS["min_age"]:
            raise ValueError(f"max_age must be at least {STORY_CONSTANTS['min_age']}")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def load_pipeline_config() -> PipelineConfig:
    """Build a PipelineConfig from STORY_* and IMAGE_* environment variables."""
    return PipelineConfig(
        photo_driven=_env_bool("STORY_PHOTO_DRIVEN", True),
        page_count=_env_int("STORY_PAGE_COUNT", STORY_CONSTANTS["page_count"]),
        model=os.getenv("STORY_MODEL") or None,
        temperature=_env_float("STORY_TEMPERATURE", STORY_CONSTANTS["temperature"]),
        max_tokens=_env_int("STORY_MAX_TOKENS", STORY_CONSTANTS["max_tokens"]),
        illustrate=_env_bool("STORY_ILLUSTRATE", True),
        strict_attributes=_env_bool("STORY_STRICT_ATTRIBUTES", False),
        poll_interval=_env_float("IMAGE_POLL_INTERVAL", IMAGE_CONSTANTS["poll_interval"]),
        max_poll_attempts=_env_int("IMAGE_MAX_POLL_ATTEMPTS", IMAGE_CONSTANTS["max_poll_attempts"]),
        max_concurrency=_env_int("IMAGE_MAX_CONCURRENCY", None),
        request_timeout=_env_float("STORY_REQUEST_TIMEOUT", STORY_CONSTANTS["request_timeout"]),
        max_age=_env_int("STORY_MAX_AGE", None),
    )
