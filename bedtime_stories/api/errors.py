"""Mapping of pipeline failures onto HTTP error responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import StoryGenerationError, ValidationError
from .logging import story_logger
from .models.responses import ErrorResponse

logger = logging.getLogger(__name__)

GENERAL_ERROR_MESSAGE = "Failed to process your request. Please try again."


def error_payload(error: Exception) -> tuple[int, ErrorResponse]:
    """Return (status_code, body) for any exception raised while handling a request."""
    if isinstance(error, StoryGenerationError):
        return error.status_code, ErrorResponse(error=error.message, code=error.code)
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(error=GENERAL_ERROR_MESSAGE, code="GENERAL_ERROR"),
    )


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None)


async def story_error_handler(request: Request, exc: StoryGenerationError) -> JSONResponse:
    status_code, body = error_payload(exc)
    if isinstance(exc, ValidationError):
        logger.info(f"Rejected request: {exc}", extra={"request_id": _request_id(request), "code": exc.code})
    else:
        story_logger.generation_failed(_request_id(request), exc, code=exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's own validation failures in the same {error, code} shape."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid value for {location}" if location else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=message, code=ValidationError.code).model_dump(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    story_logger.generation_failed(_request_id(request), exc, code="GENERAL_ERROR")
    status_code, body = error_payload(exc)
    return JSONResponse(status_code=status_code, content=body.model_dump())
