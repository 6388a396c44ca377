"""FastAPI dependency injection for gateways and the story pipeline."""

from typing import Annotated

from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, Request

# Load .env from project root (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

from ..config import PipelineConfig  # noqa: E402
from ..core.gateways import ImageGenerationGateway, TextCompletionGateway  # noqa: E402
from ..core.programs import StoryPipeline  # noqa: E402


# Gateways are created once in the application lifespan and stored on app.state
def get_pipeline_config(request: Request) -> PipelineConfig:
    """Get the pipeline configuration loaded at startup."""
    return request.app.state.pipeline_config


def get_text_gateway(request: Request) -> TextCompletionGateway:
    """Get the shared text-completion gateway."""
    return request.app.state.text_gateway


def get_image_gateway(request: Request) -> ImageGenerationGateway:
    """Get the shared image-generation gateway."""
    return request.app.state.image_gateway


# Pipeline - depends on gateways and config
def get_pipeline(
    text_gateway: Annotated[TextCompletionGateway, Depends(get_text_gateway)],
    image_gateway: Annotated[ImageGenerationGateway, Depends(get_image_gateway)],
    config: Annotated[PipelineConfig, Depends(get_pipeline_config)],
) -> StoryPipeline:
    """Get a StoryPipeline wired to the shared gateways."""
    return StoryPipeline(text_gateway, image_gateway, config)


# Type aliases for cleaner route signatures
Pipeline = Annotated[StoryPipeline, Depends(get_pipeline)]
