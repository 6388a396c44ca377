"""Unit tests for bedtime_stories/core/types.py and the error taxonomy."""

import pytest

from bedtime_stories.core.errors import (
    CompletionError,
    ExtractionError,
    IllustrationTimeoutError,
    ParseError,
    QuotaExceededError,
    RateLimitError,
    StoryGenerationError,
    ValidationError,
)
from bedtime_stories.core.types import (
    ATTRIBUTE_DEFAULTS,
    CharacterAttributes,
    ImageStatus,
    Story,
    StoryPage,
    build_fallback_description,
)


# =============================================================================
# CharacterAttributes tests
# =============================================================================


class TestCharacterAttributes:
    """Tests for the ten-slot character description."""

    def test_has_ten_slots(self):
        assert CharacterAttributes.slot_names() == list(ATTRIBUTE_DEFAULTS)

    def test_defaults_fill_every_slot(self):
        description = CharacterAttributes().to_description()

        assert "brown simple hairstyle hair" in description
        assert "with no accessories" in description
        assert "{" not in description

    def test_from_mapping_ignores_unknown_and_blank(self):
        attributes = CharacterAttributes.from_mapping({
            "hair_color": " red ",
            "skin_tone": "   ",
            "favourite_food": "pizza",
        })

        assert attributes.hair_color == "red"
        assert attributes.skin_tone == ATTRIBUTE_DEFAULTS["skin_tone"]

    def test_description_is_deterministic(self):
        values = {"hairstyle": "bob", "hair_color": "black", "action": "jumping"}

        first = CharacterAttributes.from_mapping(values).to_description()
        second = CharacterAttributes.from_mapping(dict(reversed(values.items()))).to_description()

        assert first == second

    def test_fallback_description(self):
        assert build_fallback_description("Leo", 6, "boy") == (
            "Leo, a cheerful 6-year-old boy, in a soft, colorful children's picture book style"
        )


# =============================================================================
# Story tests
# =============================================================================


class TestStory:
    def test_page_defaults(self):
        page = StoryPage(page_number=1, content="Hi.", image_prompt="hi")

        assert page.image_url is None
        assert page.image_status == ImageStatus.PENDING

    def test_image_status_serializes_as_lowercase(self):
        assert ImageStatus.FAILED.value == "failed"
        assert ImageStatus("complete") is ImageStatus.COMPLETE

    def test_formatted_string(self):
        story = Story(
            title="The Fox",
            pages=[
                StoryPage(1, "A fox ran.", "a fox", "https://img/1.png", ImageStatus.COMPLETE),
                StoryPage(2, "It slept.", "a sleeping fox"),
            ],
        )

        text = story.to_formatted_string()

        assert story.page_count == 2
        assert text.startswith("# The Fox")
        assert "## Page 1" in text
        assert "![Page 1](https://img/1.png)" in text
        assert "![Page 2]" not in text
        assert "*Illustration prompt: a sleeping fox*" in text


# =============================================================================
# Error taxonomy tests
# =============================================================================


class TestErrors:
    @pytest.mark.parametrize("error,code,status", [
        (ValidationError("Age is required"), "VALIDATION_ERROR", 400),
        (RateLimitError(), "RATE_LIMIT_EXCEEDED", 429),
        (QuotaExceededError(), "QUOTA_EXCEEDED", 402),
        (CompletionError(), "COMPLETION_API_ERROR", 500),
        (ExtractionError(), "EXTRACTION_FAILED", 500),
        (ParseError(), "PARSE_FAILED", 500),
        (StoryGenerationError(), "GENERAL_ERROR", 500),
    ])
    def test_codes_and_statuses(self, error, code, status):
        assert error.code == code
        assert error.status_code == status

    def test_completion_error_forwards_upstream_status(self):
        assert CompletionError("x", upstream_status=503).status_code == 503

    def test_completion_error_ignores_non_error_status(self):
        assert CompletionError("x", upstream_status=200).status_code == 500

    def test_rate_limit_keeps_429_for_any_upstream_status(self):
        assert RateLimitError("x", upstream_status=None).status_code == 429

    def test_detail_does_not_replace_message(self):
        error = ExtractionError("raw vision reply: ...")

        assert error.detail == "raw vision reply: ..."
        assert error.message == "We couldn't read the photo. Please try a different picture."

    def test_validation_message_names_the_field(self):
        assert ValidationError("Gender is required", field="gender").message == "Gender is required"

    def test_timeout_is_an_illustration_error(self):
        assert IllustrationTimeoutError().code == "ILLUSTRATION_TIMEOUT"
