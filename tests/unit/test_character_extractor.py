"""Unit tests for photo -> character description extraction."""

import pytest

from bedtime_stories.core.errors import CompletionError, ExtractionError, RateLimitError
from bedtime_stories.core.modules.character_extractor import (
    CharacterExtractor,
    parse_attribute_lines,
)
from bedtime_stories.core.types import ATTRIBUTE_DEFAULTS

from tests.unit.conftest import PNG_BYTES, SAMPLE_ATTRIBUTE_REPLY


class TestParseAttributeLines:
    """Lenient Key: Value parsing."""

    def test_parses_all_ten_slots(self):
        parsed = parse_attribute_lines(SAMPLE_ATTRIBUTE_REPLY)

        assert len(parsed) == 10
        assert parsed["hairstyle"] == "pigtails"
        assert parsed["hair_color"] == "blonde"
        assert parsed["upper_garment_color"] == "yellow"
        assert parsed["action"] == "waving"

    def test_skips_lines_without_colon(self):
        parsed = parse_attribute_lines("Here is what I see\nHair Color: red\nThanks!")
        assert parsed == {"hair_color": "red"}

    def test_skips_empty_keys_and_values(self):
        parsed = parse_attribute_lines(": orphan value\nHairstyle:\nSkin Tone: tan")
        assert parsed == {"skin_tone": "tan"}

    def test_skips_unknown_keys(self):
        parsed = parse_attribute_lines("Favourite Food: pizza\nAction: jumping")
        assert parsed == {"action": "jumping"}

    def test_value_with_colon_keeps_remainder(self):
        parsed = parse_attribute_lines("Accessories: badge reading: hello")
        assert parsed["accessories"] == "badge reading: hello"

    def test_strips_markdown_bullets_and_trailing_period(self):
        raw = "- **Hair Color:** dark brown.\n* Hairstyle: `curly bob`\n1. Skin Tone: \"olive\""
        parsed = parse_attribute_lines(raw)

        assert parsed["hair_color"] == "dark brown"
        assert parsed["hairstyle"] == "curly bob"
        assert parsed["skin_tone"] == "olive"

    @pytest.mark.parametrize("key", ["Hair Colour", "HAIR_COLOR", "haircolor", "hair color"])
    def test_key_aliases(self, key):
        assert parse_attribute_lines(f"{key}: black") == {"hair_color": "black"}

    def test_first_occurrence_wins(self):
        parsed = parse_attribute_lines("Action: running\nAction: sitting")
        assert parsed["action"] == "running"


class TestBuildAttributes:
    def test_full_reply_builds_description(self, mock_text_gateway):
        extractor = CharacterExtractor(mock_text_gateway)
        description = extractor.build_attributes(SAMPLE_ATTRIBUTE_REPLY).to_description()

        assert description.startswith("A child with blonde pigtails hair and fair skin")
        assert "yellow t-shirt and blue jeans" in description
        assert "with round glasses" in description
        assert "smiling and waving" in description
        assert description.endswith("children's picture book style")

    def test_missing_slots_are_defaulted(self, mock_text_gateway):
        extractor = CharacterExtractor(mock_text_gateway)
        attributes = extractor.build_attributes("Hairstyle: braids\nHair Color: red\nSkin Tone: dark")

        assert attributes.hairstyle == "braids"
        assert attributes.accessories == ATTRIBUTE_DEFAULTS["accessories"]
        assert attributes.action == ATTRIBUTE_DEFAULTS["action"]

    def test_no_parsable_lines_raises(self, mock_text_gateway):
        extractor = CharacterExtractor(mock_text_gateway)

        with pytest.raises(ExtractionError):
            extractor.build_attributes("I'm sorry, I can't describe people in photos.")

    def test_strict_mode_rejects_missing_critical_slot(self, mock_text_gateway):
        extractor = CharacterExtractor(mock_text_gateway, strict=True)

        with pytest.raises(ExtractionError) as exc_info:
            extractor.build_attributes("Hairstyle: braids\nAction: reading")

        assert "hair_color" in exc_info.value.detail
        assert "skin_tone" in exc_info.value.detail

    def test_strict_mode_allows_missing_non_critical_slot(self, mock_text_gateway):
        extractor = CharacterExtractor(mock_text_gateway, strict=True)
        attributes = extractor.build_attributes("Hairstyle: braids\nHair Color: red\nSkin Tone: dark")

        assert attributes.upper_garment == ATTRIBUTE_DEFAULTS["upper_garment"]


class TestExtract:
    @pytest.mark.asyncio
    async def test_sends_photo_as_inline_image(self, mock_text_gateway):
        mock_text_gateway.complete.return_value = SAMPLE_ATTRIBUTE_REPLY
        extractor = CharacterExtractor(mock_text_gateway, temperature=0.1, max_tokens=300)

        await extractor.extract(PNG_BYTES, "image/png")

        messages = mock_text_gateway.complete.call_args.args[0]
        assert messages[0]["role"] == "system"
        user_parts = messages[1]["content"]
        image_parts = [part for part in user_parts if part["type"] == "image_url"]
        assert len(image_parts) == 1
        assert image_parts[0]["image_url"]["url"].startswith("data:image/png;base64,")

        kwargs = mock_text_gateway.complete.call_args.kwargs
        assert kwargs == {"temperature": 0.1, "max_tokens": 300}

    @pytest.mark.asyncio
    async def test_returns_description(self, mock_text_gateway, sample_description):
        mock_text_gateway.complete.return_value = SAMPLE_ATTRIBUTE_REPLY
        extractor = CharacterExtractor(mock_text_gateway)

        assert await extractor.extract(PNG_BYTES, "image/png") == sample_description

    @pytest.mark.asyncio
    async def test_completion_failure_becomes_extraction_error(self, mock_text_gateway):
        mock_text_gateway.complete.side_effect = CompletionError("boom", upstream_status=503)
        extractor = CharacterExtractor(mock_text_gateway)

        with pytest.raises(ExtractionError) as exc_info:
            await extractor.extract(PNG_BYTES, "image/png")

        assert exc_info.value.code == "EXTRACTION_FAILED"
        assert isinstance(exc_info.value.__cause__, CompletionError)

    @pytest.mark.asyncio
    async def test_rate_limit_on_vision_call_becomes_extraction_error(self, mock_text_gateway):
        mock_text_gateway.complete.side_effect = RateLimitError("slow down")
        extractor = CharacterExtractor(mock_text_gateway)

        with pytest.raises(ExtractionError):
            await extractor.extract(PNG_BYTES, "image/jpeg")

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self, mock_text_gateway):
        mock_text_gateway.complete.return_value = ""
        extractor = CharacterExtractor(mock_text_gateway)

        with pytest.raises(ExtractionError):
            await extractor.extract(PNG_BYTES, "image/png")
