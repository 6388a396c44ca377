"""
Error taxonomy for story generation.

Every error carries a stable ``code`` and an HTTP ``status_code`` so the API
layer can render it without knowing which stage raised it. The ``message``
is user-facing; diagnostic detail belongs in logs, not in the message.
"""

from typing import Optional


class StoryGenerationError(Exception):
    """Base class for all pipeline failures."""

    code = "GENERAL_ERROR"
    status_code = 500
    message = "Failed to process your request. Please try again."

    def __init__(self, detail: str = None, *, message: str = None):
        super().__init__(detail or message or self.message)
        self.detail = detail
        if message:
            self.message = message


class ValidationError(StoryGenerationError):
    """A required request field is missing or malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400
    message = "Please provide the child's name, age, gender and a photo."

    def __init__(self, detail: str = None, *, field: str = None):
        # The detail names the offending field, which is safe to show
        super().__init__(detail, message=detail)
        self.field = field


class CompletionError(StoryGenerationError):
    """The text-completion gateway failed or returned nothing."""

    code = "COMPLETION_API_ERROR"
    message = "An error occurred while generating the story. Please try again."

    def __init__(self, detail: str = None, *, upstream_status: Optional[int] = None):
        super().__init__(detail)
        self.upstream_status = upstream_status
        if upstream_status and 400 <= upstream_status < 600:
            self.status_code = upstream_status


class RateLimitError(CompletionError):
    """The text-completion provider rejected the call with a rate limit."""

    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    message = "API rate limit exceeded. Please try again in a few moments."

    def __init__(self, detail: str = None, *, upstream_status: Optional[int] = 429):
        super().__init__(detail, upstream_status=upstream_status)
        self.status_code = 429


class QuotaExceededError(CompletionError):
    """The text-completion account is out of credit."""

    code = "QUOTA_EXCEEDED"
    status_code = 402
    message = "API quota exceeded. Please check your provider account."

    def __init__(self, detail: str = None, *, upstream_status: Optional[int] = 402):
        super().__init__(detail, upstream_status=upstream_status)
        self.status_code = 402


class ExtractionError(StoryGenerationError):
    """The photo could not be turned into a character description."""

    code = "EXTRACTION_FAILED"
    message = "We couldn't read the photo. Please try a different picture."


class ParseError(StoryGenerationError):
    """The model's story reply was empty."""

    code = "PARSE_FAILED"
    message = "The story came back empty. Please try again."


class IllustrationError(StoryGenerationError):
    """A single page's image could not be produced.

    Never reaches the client: the illustrator swaps in a placeholder.
    """

    code = "ILLUSTRATION_FAILED"


class IllustrationTimeoutError(IllustrationError):
    """An image job was still pending when the poll ceiling was reached."""

    code = "ILLUSTRATION_TIMEOUT"
