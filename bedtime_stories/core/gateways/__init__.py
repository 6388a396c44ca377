"""Clients for the hosted text-completion and image-generation APIs."""

from .image_generation import GenerationStatus, ImageGenerationGateway, JobStatus
from .text_completion import TextCompletionGateway, image_content_part

__all__ = [
    "GenerationStatus",
    "ImageGenerationGateway",
    "JobStatus",
    "TextCompletionGateway",
    "image_content_part",
]
