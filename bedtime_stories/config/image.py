"""
Image generation configuration for the Bedtime Story Generator.

Uses the Leonardo AI REST API, which renders asynchronously: a generation is
submitted, then its status is polled until complete, failed or timed out.
"""

import logging
import os

import httpx
from dotenv import find_dotenv, load_dotenv
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

# Image generation constants
IMAGE_CONSTANTS = {
    "base_url": "https://cloud.leonardo.ai/api/rest/v1",
    "model_id": "e316348f-7773-490e-adcd-46757c738eb7",  # Leonardo Creative
    "width": 768,
    "height": 512,
    "num_images": 1,
    "poll_interval": 12.0,  # seconds between status checks
    "max_poll_attempts": 15,  # ~3 minutes ceiling
    "http_timeout": 30.0,
    "style_prefix": "simple children's illustration",
    "style_suffix": "basic colors, simple shapes",
    "negative_prompt": "ugly, blurry, low quality, distorted, disfigured, text, watermark",
    "placeholder_url": "https://picsum.photos/{width}/{height}?random={token}",
}

# Network errors that should trigger retry
RETRYABLE_EXCEPTIONS = (
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
)


def get_leonardo_api_key() -> str:
    """
    Get the Leonardo API key.

    Accepts NEXT_PUBLIC_LEONARDO_API_KEY as a fallback so an existing
    front-end .env can be reused unchanged.
    """
    api_key = os.getenv("LEONARDO_API_KEY") or os.getenv("NEXT_PUBLIC_LEONARDO_API_KEY")
    if not api_key:
        logger.warning("LEONARDO_API_KEY not set - every illustration will fall back to a placeholder")
        return ""
    return api_key


def _is_retryable(exc: BaseException) -> bool:
    """Retry network errors, 429s and 5xx responses; never other 4xx."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code == 429 or code >= 500
    return False


# Retry decorator for a single Leonardo HTTP request (submit or one status check)
image_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception(_is_retryable),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
