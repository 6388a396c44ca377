"""FastAPI application for the Bedtime Story Generator."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_text_model_name, load_pipeline_config
from ..core.errors import StoryGenerationError
from ..core.gateways import ImageGenerationGateway, TextCompletionGateway
from .errors import request_validation_handler, story_error_handler, unhandled_error_handler
from .logging import configure_logging_from_env
from .routes import stories

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    configure_logging_from_env()

    # Startup: build the gateways once and share them across requests
    config = load_pipeline_config()
    app.state.pipeline_config = config
    app.state.text_gateway = TextCompletionGateway(model=config.model)
    app.state.image_gateway = ImageGenerationGateway(
        poll_interval=config.poll_interval,
        max_poll_attempts=config.max_poll_attempts,
    )
    logger.info(
        f"Story pipeline ready: model={get_text_model_name(config.model)}, {config.page_count} pages, "
        f"photo_driven={config.photo_driven}, illustrate={config.illustrate}"
    )

    yield

    # Shutdown: close the image gateway's HTTP client
    await app.state.image_gateway.aclose()


app = FastAPI(
    title="Bedtime Story Generator API",
    description="""
Generate short, personalized, illustrated bedtime stories.

## Features
- **Photo-driven stories**: Upload a photo and the child becomes the illustrated hero
- **Text-only stories**: Just a name and an age
- **Resilient illustrations**: Pages whose image fails or times out get a placeholder picture

## Workflow
1. POST `/api/generate-story` with a JSON body or a multipart form
2. Render `title` and `pages[]` (each with `imageUrl` and `imageStatus`)
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StoryGenerationError, story_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include routers
app.include_router(stories.router, prefix="/api", tags=["Stories"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
