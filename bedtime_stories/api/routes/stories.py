"""Story generation endpoint."""

import time
import uuid

from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from ...core.errors import ValidationError
from ...core.types import ImageStatus
from ..dependencies import Pipeline
from ..logging import story_logger
from ..models.requests import GenerateStoryRequest
from ..models.responses import ErrorResponse, StoryResponse

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_form(request: Request, pipeline) -> tuple:
    form = await request.form()
    upload = form.get("image")

    photo = mime_type = None
    if isinstance(upload, UploadFile):
        photo = await upload.read()
        mime_type = upload.content_type

    story_request = pipeline.prepare_request(
        child_name=form.get("childName"),
        age=form.get("age"),
        gender=form.get("gender"),
        photo=photo,
        photo_mime_type=mime_type,
    )
    return story_request, "photo" if story_request.photo is not None else "text"


async def _read_json(request: Request, pipeline) -> tuple:
    try:
        body = GenerateStoryRequest.model_validate(await request.json())
    except ValueError:
        raise ValidationError("Request body must be a JSON object with childName and age") from None

    story_request = pipeline.prepare_request(
        child_name=body.child_name,
        age=body.age,
        gender=body.gender,
        require_photo=False,
    )
    return story_request, "text"


@router.post(
    "/generate-story",
    response_model=StoryResponse,
    summary="Generate an illustrated bedtime story",
    description=(
        "Accepts either a JSON body {childName, age, gender?} (text-only story) or a "
        "multipart form {childName, age, gender, image} (story starring the child in the photo). "
        "Returns the story once all page illustrations have finished or fallen back to placeholders."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed field"},
        402: {"model": ErrorResponse, "description": "Text API quota exceeded"},
        429: {"model": ErrorResponse, "description": "Text API rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Story generation failed"},
    },
)
async def generate_story(request: Request, pipeline: Pipeline):
    """Generate a personalized, illustrated story."""
    request_id = uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    start_time = time.monotonic()

    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        story_request, variant = await _read_form(request, pipeline)
    else:
        story_request, variant = await _read_json(request, pipeline)

    story_logger.generation_started(request_id, variant)

    story = await pipeline.run(story_request, request_id=request_id)

    failed_images = sum(1 for page in story.pages if page.image_status == ImageStatus.FAILED)
    story_logger.generation_completed(
        request_id,
        time.monotonic() - start_time,
        page_count=story.page_count,
        failed_images=failed_images,
    )

    return StoryResponse.from_story(story)
