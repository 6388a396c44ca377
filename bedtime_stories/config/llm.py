"""
LLM configuration for the Bedtime Story Generator.

A single text-completion LM serves both the vision step (photo -> character
attributes) and the story step, so the chosen model must accept image input.

Includes:
- 120s timeout per LLM call to fail fast on hanging connections
- Retry with exponential backoff for transient network errors
"""

import logging
import os

import dspy
from dotenv import find_dotenv, load_dotenv
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

# Timeout for LLM calls (seconds)
LLM_TIMEOUT = 120

# Network errors that should trigger retry. Rate limit and quota errors are
# deliberately absent: they are surfaced to the caller with their own codes.
RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    BrokenPipeError,
)

# Provider priority: first key found in the environment wins.
PROVIDER_MODELS = (
    ("OPENAI_API_KEY", "openai/gpt-4o-mini"),
    ("ANTHROPIC_API_KEY", "anthropic/claude-sonnet-4-20250514"),
    ("GOOGLE_API_KEY", "gemini/gemini-2.5-flash"),
)


def _resolve_provider(model: str = None) -> tuple[str, str]:
    """Return (model, api_key) for the configured provider."""
    override = model or os.getenv("STORY_MODEL")

    for env_var, default_model in PROVIDER_MODELS:
        api_key = os.getenv(env_var)
        if not api_key:
            continue
        if override is None:
            return default_model, api_key
        # An explicit model only pairs with the key of its own provider
        provider = default_model.split("/", 1)[0]
        if override.startswith(f"{provider}/") or (provider == "openai" and "/" not in override):
            return override, api_key

    if override:
        # Let litellm pick the key up from its own environment lookup
        return override, None

    raise ValueError(
        "No API key found. Set OPENAI_API_KEY, ANTHROPIC_API_KEY, or GOOGLE_API_KEY in .env"
    )


def get_text_lm(
    model: str = None,
    temperature: float = 0.7,
    max_tokens: int = 1500,
) -> dspy.LM:
    """
    Get the text-completion LM used for character extraction and story writing.

    Caching is disabled: two children with the same name and age should not
    receive the same story.
    """
    resolved_model, api_key = _resolve_provider(model)
    kwargs = {}
    if api_key:
        kwargs["api_key"] = api_key

    return dspy.LM(
        resolved_model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=LLM_TIMEOUT,
        cache=False,
        **kwargs,
    )


def get_text_model_name(model: str = None) -> str:
    """Get the name of the text model that will be used."""
    try:
        return _resolve_provider(model)[0]
    except ValueError:
        return "unknown"


# Retry decorator for LLM calls with network errors
llm_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=2, min=2, max=10),
    retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
