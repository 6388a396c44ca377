"""Structured logging infrastructure for the API layer.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a StoryLogger helper for story generation events.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Structured fields copied from LogRecord extras into the JSON payload
EXTRA_FIELDS = (
    "request_id",
    "stage",
    "duration",
    "attempt",
    "error_type",
    "code",
    "page_number",
    "page_count",
    "failed_images",
    "variant",
    "upstream_status",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create console handler
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


def configure_logging_from_env() -> None:
    """Configure logging from LOG_FORMAT (json|text) and LOG_LEVEL."""
    json_format = os.getenv("LOG_FORMAT", "json").lower() != "text"
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    configure_logging(json_format=json_format, level=level)


class StoryLogger:
    """Logger for story generation events with structured fields."""

    def __init__(self):
        self.logger = logging.getLogger("story_generation")

    def generation_started(self, request_id: str, variant: str) -> None:
        self.logger.info(
            "Story generation started",
            extra={"request_id": request_id, "stage": "started", "variant": variant},
        )

    def generation_completed(
        self,
        request_id: str,
        duration: float,
        page_count: int,
        failed_images: int = 0,
    ) -> None:
        self.logger.info(
            "Story generation completed",
            extra={
                "request_id": request_id,
                "stage": "completed",
                "duration": round(duration, 2),
                "page_count": page_count,
                "failed_images": failed_images,
            },
        )

    def generation_failed(self, request_id: str, error: Exception, code: str = None) -> None:
        extra = {"request_id": request_id, "stage": "failed", "error_type": type(error).__name__}
        if code:
            extra["code"] = code
        self.logger.error(f"Story generation failed: {error}", extra=extra, exc_info=True)


# Global story logger instance
story_logger = StoryLogger()
