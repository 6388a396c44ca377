"""
Configuration module for the Bedtime Story Generator.

Re-exports all configuration so callers can import from one place.
"""

from .llm import LLM_TIMEOUT, get_text_lm, get_text_model_name, llm_retry
from .story import STORY_CONSTANTS, PipelineConfig, load_pipeline_config
from .image import IMAGE_CONSTANTS, get_leonardo_api_key, image_retry

__all__ = [
    # LLM
    "LLM_TIMEOUT",
    "get_text_lm",
    "get_text_model_name",
    "llm_retry",
    # Story
    "STORY_CONSTANTS",
    "PipelineConfig",
    "load_pipeline_config",
    # Image
    "IMAGE_CONSTANTS",
    "get_leonardo_api_key",
    "image_retry",
]
