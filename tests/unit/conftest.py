"""Shared fixtures for unit tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from bedtime_stories.api.dependencies import get_pipeline
from bedtime_stories.api.main import app
from bedtime_stories.config import PipelineConfig
from bedtime_stories.core.gateways import ImageGenerationGateway, TextCompletionGateway
from bedtime_stories.core.modules.character_extractor import parse_attribute_lines
from bedtime_stories.core.programs import StoryPipeline
from bedtime_stories.core.types import CharacterAttributes


SAMPLE_ATTRIBUTE_REPLY = """Hairstyle: pigtails
Hair Color: blonde
Skin Tone: fair
Accessories: round glasses
Upper Garment: t-shirt
Lower Garment: jeans
Upper Garment Color: yellow
Lower Garment Color: blue
Facial Expression: smiling
Action: waving"""

# Smallest byte string that still looks like a PNG upload
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def make_story_reply(description: str, page_count: int = 3, title: str = "Ava and the Moon") -> str:
    """Build a well-formed model reply whose image prompts embed the description."""
    blocks = [f"Title: {title}", ""]
    for n in range(1, page_count + 1):
        blocks.extend([
            f"**Page {n}**",
            f"Content: Page {n} of Ava's adventure under the stars.",
            f"Image Prompt: {description}, scene {n} in a moonlit garden",
            "",
        ])
    return "\n".join(blocks)


@pytest.fixture
def sample_description() -> str:
    """The description the extractor produces for SAMPLE_ATTRIBUTE_REPLY."""
    return CharacterAttributes.from_mapping(parse_attribute_lines(SAMPLE_ATTRIBUTE_REPLY)).to_description()


@pytest.fixture
def mock_text_gateway():
    """Text gateway whose complete() is an AsyncMock."""
    return AsyncMock(spec=TextCompletionGateway)


@pytest.fixture
def mock_image_gateway():
    """Image gateway whose generate() returns a URL per call."""
    gateway = AsyncMock(spec=ImageGenerationGateway)
    gateway.generate = AsyncMock(
        side_effect=lambda prompt, negative_prompt="": f"https://cdn.leonardo.ai/{abs(hash(prompt))}.png"
    )
    return gateway


@pytest.fixture
def test_config() -> PipelineConfig:
    """Pipeline config with no polling delay."""
    return PipelineConfig(page_count=3, poll_interval=0, max_poll_attempts=2, request_timeout=5)


@pytest.fixture
def pipeline(mock_text_gateway, mock_image_gateway, test_config) -> StoryPipeline:
    return StoryPipeline(mock_text_gateway, mock_image_gateway, test_config)


@pytest.fixture
def client_with_mocks(pipeline, mock_text_gateway, mock_image_gateway):
    """TestClient whose pipeline uses mocked gateways."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client, mock_text_gateway, mock_image_gateway

    app.dependency_overrides.clear()
