"""Unit tests for configuration, retry policy and structured logging."""

import json
import logging

import httpx
import pytest

from bedtime_stories.api.logging import JSONFormatter
from bedtime_stories.config import PipelineConfig, load_pipeline_config
from bedtime_stories.config.image import _is_retryable, get_leonardo_api_key, image_retry
from bedtime_stories.config.llm import _resolve_provider


def _status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://leonardo.test/generations/x")
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError(f"{code}", request=request, response=response)


class TestImageRetryPolicy:
    """Tests for which Leonardo failures are retried."""

    @pytest.mark.parametrize("code", [429, 500, 502, 503])
    def test_retries_rate_limits_and_server_errors(self, code):
        """Should retry 429 and 5xx responses."""
        assert _is_retryable(_status_error(code))

    @pytest.mark.parametrize("code", [400, 401, 403, 404])
    def test_does_not_retry_client_errors(self, code):
        """Should NOT retry other 4xx responses."""
        assert not _is_retryable(_status_error(code))

    def test_retries_transport_errors(self):
        """Should retry connection failures and timeouts."""
        assert _is_retryable(httpx.ConnectError("refused"))
        assert _is_retryable(httpx.ReadTimeout("slow"))

    def test_does_not_retry_other_errors(self):
        assert not _is_retryable(ValueError("bad json"))

    def test_decorator_does_not_retry_400(self):
        """A 400 propagates after a single call."""
        call_count = 0

        @image_retry
        def bad_request():
            nonlocal call_count
            call_count += 1
            raise _status_error(400)

        with pytest.raises(httpx.HTTPStatusError):
            bad_request()
        assert call_count == 1


class TestLeonardoApiKey:
    def test_primary_variable(self, monkeypatch):
        monkeypatch.setenv("LEONARDO_API_KEY", "primary")
        monkeypatch.setenv("NEXT_PUBLIC_LEONARDO_API_KEY", "public")
        assert get_leonardo_api_key() == "primary"

    def test_public_fallback(self, monkeypatch):
        monkeypatch.delenv("LEONARDO_API_KEY", raising=False)
        monkeypatch.setenv("NEXT_PUBLIC_LEONARDO_API_KEY", "public")
        assert get_leonardo_api_key() == "public"

    def test_missing_key_is_empty(self, monkeypatch):
        monkeypatch.delenv("LEONARDO_API_KEY", raising=False)
        monkeypatch.delenv("NEXT_PUBLIC_LEONARDO_API_KEY", raising=False)
        assert get_leonardo_api_key() == ""


class TestResolveProvider:
    """Tests for text model selection from the environment."""

    @pytest.fixture(autouse=True)
    def clear_keys(self, monkeypatch):
        for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY", "STORY_MODEL"):
            monkeypatch.delenv(name, raising=False)

    def test_first_available_key_wins(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")

        model, api_key = _resolve_provider()

        assert model.startswith("anthropic/")
        assert api_key == "a-key"

    def test_openai_preferred(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")

        assert _resolve_provider() == ("openai/gpt-4o-mini", "o-key")

    def test_explicit_model_pairs_with_its_provider_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")

        assert _resolve_provider("gemini/gemini-2.0-flash") == ("gemini/gemini-2.0-flash", "g-key")

    def test_story_model_env_override(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        monkeypatch.setenv("STORY_MODEL", "openai/gpt-4o")

        assert _resolve_provider() == ("openai/gpt-4o", "o-key")

    def test_no_key_raises(self):
        with pytest.raises(ValueError, match="No API key found"):
            _resolve_provider()


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()

        assert config.page_count == 5
        assert config.poll_interval == 12.0
        assert config.max_poll_attempts == 15
        assert config.photo_driven is True
        assert config.illustrate is True
        assert config.max_age is None

    @pytest.mark.parametrize("kwargs", [
        {"page_count": 0},
        {"page_count": 13},
        {"max_poll_attempts": 0},
        {"poll_interval": -1},
        {"max_age": 0},
    ])
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)

    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("STORY_PAGE_COUNT", "3")
        monkeypatch.setenv("STORY_PHOTO_DRIVEN", "false")
        monkeypatch.setenv("STORY_ILLUSTRATE", "no")
        monkeypatch.setenv("STORY_STRICT_ATTRIBUTES", "1")
        monkeypatch.setenv("IMAGE_POLL_INTERVAL", "2.5")
        monkeypatch.setenv("IMAGE_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("STORY_MAX_AGE", "10")
        monkeypatch.setenv("STORY_MODEL", "")

        config = load_pipeline_config()

        assert config.page_count == 3
        assert config.photo_driven is False
        assert config.illustrate is False
        assert config.strict_attributes is True
        assert config.poll_interval == 2.5
        assert config.max_concurrency == 2
        assert config.model is None
        assert config.max_age == 10


class TestJSONFormatter:
    def test_includes_known_extras_only(self):
        record = logging.LogRecord("story_generation", logging.INFO, __file__, 1, "done", None, None)
        record.request_id = "abc123"
        record.page_count = 5
        record.secret = "ignored"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "story_generation"
        assert payload["message"] == "done"
        assert payload["request_id"] == "abc123"
        assert payload["page_count"] == 5
        assert "secret" not in payload
        assert payload["timestamp"].endswith("Z")
