"""
Text-completion gateway.

Wraps a ``dspy.LM`` so the rest of the pipeline only sees
``complete(messages) -> str``. Provider exceptions (litellm/OpenAI style,
carrying ``status_code``) are translated into the CompletionError family.
"""

import base64
import logging
from typing import Optional

import dspy

from bedtime_stories.config import get_text_lm, llm_retry
from ..errors import CompletionError, QuotaExceededError, RateLimitError

logger = logging.getLogger(__name__)


def image_content_part(photo_bytes: bytes, mime_type: str) -> dict:
    """Build an inline image message part (base64 data URL)."""
    encoded = base64.b64encode(photo_bytes).decode("ascii")
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
    }


def _upstream_status(exc: Exception) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    return status if isinstance(status, int) else None


def translate_provider_error(exc: Exception) -> CompletionError:
    """Map a provider exception onto a CompletionError subclass."""
    status = _upstream_status(exc)
    text = str(exc).lower()
    detail = f"{type(exc).__name__}: {exc}"

    # OpenAI reports exhausted credit as a 429 with code insufficient_quota
    if status == 402 or "insufficient_quota" in text or ("quota" in text and "exceeded" in text):
        return QuotaExceededError(detail, upstream_status=status)
    if status == 429 or "rate limit" in text or "ratelimit" in type(exc).__name__.lower():
        return RateLimitError(detail, upstream_status=status)
    return CompletionError(detail, upstream_status=status)


class TextCompletionGateway:
    """
    Thin client to a hosted chat-completion API.

    Args:
        lm: Explicit LM to use. If omitted one is built from the environment
            with get_text_lm(model).
        model: Model identifier passed to get_text_lm when lm is omitted.
    """

    def __init__(self, lm: dspy.LM = None, model: str = None):
        self._lm = lm
        self._model = model

    @property
    def lm(self) -> dspy.LM:
        if self._lm is None:
            self._lm = get_text_lm(self._model)
        return self._lm

    @property
    def model_name(self) -> str:
        return getattr(self.lm, "model", self._model or "unknown")

    @llm_retry
    async def _call(self, messages: list[dict], **kwargs) -> list:
        return await self.lm.acall(messages=messages, **kwargs)

    async def complete(
        self,
        messages: list[dict],
        temperature: float = None,
        max_tokens: int = None,
    ) -> str:
        """
        Send role-tagged messages and return one completion's text.

        Returns an empty string if the provider produced no content; deciding
        whether that is an error is left to the caller.

        Raises:
            CompletionError: (or a subclass) on any transport/HTTP failure
        """
        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            outputs = await self._call(messages, **kwargs)
        except CompletionError:
            raise
        except Exception as e:
            error = translate_provider_error(e)
            logger.error(
                f"Text completion failed: {error.detail}",
                extra={"error_type": type(e).__name__, "upstream_status": error.upstream_status},
            )
            raise error from e

        if not outputs:
            return ""

        output = outputs[0]
        # Outputs are plain strings unless the provider returned tool calls/logprobs
        if isinstance(output, dict):
            output = output.get("text") or ""
        return (output or "").strip()
