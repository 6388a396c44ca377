"""
Image-generation gateway for the Leonardo AI REST API.

Leonardo renders asynchronously:

    submit -> generationId -> poll status -> COMPLETE (image URLs) | FAILED

``generate`` runs that state machine for one prompt. A job still pending
after ``max_poll_attempts`` checks is treated as failed (timeout), so the
caller only ever sees a URL or an IllustrationError.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from bedtime_stories.config import IMAGE_CONSTANTS, get_leonardo_api_key, image_retry
from ..errors import IllustrationError, IllustrationTimeoutError

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Status of a Leonardo generation job."""

    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, value: Optional[str]) -> "JobStatus":
        """Unknown or missing values count as still pending."""
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.PENDING


@dataclass
class GenerationStatus:
    """One status check of a generation job."""

    generation_id: str
    status: JobStatus
    image_urls: list[str] = field(default_factory=list)


class ImageGenerationGateway:
    """
    Thin async client for submitting and polling Leonardo generations.

    Args:
        api_key: Leonardo API key (defaults to LEONARDO_API_KEY)
        client: Optional httpx.AsyncClient; one is created and owned otherwise
        poll_interval: Seconds to wait between status checks
        max_poll_attempts: Status checks before the job is treated as timed out
    """

    def __init__(
        self,
        api_key: str = None,
        client: httpx.AsyncClient = None,
        base_url: str = IMAGE_CONSTANTS["base_url"],
        model_id: str = IMAGE_CONSTANTS["model_id"],
        width: int = IMAGE_CONSTANTS["width"],
        height: int = IMAGE_CONSTANTS["height"],
        num_images: int = IMAGE_CONSTANTS["num_images"],
        poll_interval: float = IMAGE_CONSTANTS["poll_interval"],
        max_poll_attempts: int = IMAGE_CONSTANTS["max_poll_attempts"],
    ):
        self.api_key = api_key if api_key is not None else get_leonardo_api_key()
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.width = width
        self.height = height
        self.num_images = num_images
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=IMAGE_CONSTANTS["http_timeout"])

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @image_retry
    async def _send(self, method: str, endpoint: str, payload: dict = None) -> dict:
        response = await self._client.request(
            method,
            f"{self.base_url}{endpoint}",
            headers=self._headers(),
            json=payload,
        )
        response.raise_for_status()
        return response.json()

    async def _request(self, method: str, endpoint: str, payload: dict = None) -> dict:
        """Send one request, translating HTTP and decoding failures into IllustrationError."""
        if not self.api_key:
            raise IllustrationError("Leonardo API key is not configured")

        try:
            return await self._send(method, endpoint, payload)
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Leonardo API error {e.response.status_code}: {e.response.text[:200]}",
                extra={"endpoint": endpoint, "error_type": "HTTPStatusError"},
            )
            raise IllustrationError(f"Leonardo API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise IllustrationError(f"Leonardo request failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise IllustrationError(f"Leonardo returned invalid JSON: {e}") from e

    async def submit(
        self,
        prompt: str,
        negative_prompt: str = "",
        width: int = None,
        height: int = None,
        count: int = None,
    ) -> str:
        """Submit a generation job and return its id."""
        payload = {
            "prompt": prompt,
            "negative_prompt": negative_prompt,
            "modelId": self.model_id,
            "num_images": count or self.num_images,
            "width": width or self.width,
            "height": height or self.height,
        }
        data = await self._request("POST", "/generations", payload)

        try:
            return data["sdGenerationJob"]["generationId"]
        except (KeyError, TypeError) as e:
            raise IllustrationError(f"Leonardo response missing generationId: {data!r:.200}") from e

    async def get_status(self, generation_id: str) -> GenerationStatus:
        """Check the status of a generation job."""
        data = await self._request("GET", f"/generations/{generation_id}")

        generation = (data or {}).get("generations_by_pk") or {}
        images = generation.get("generated_images") or []
        return GenerationStatus(
            generation_id=generation_id,
            status=JobStatus.parse(generation.get("status")),
            image_urls=[img["url"] for img in images if img.get("url")],
        )

    async def generate(self, prompt: str, negative_prompt: str = "") -> str:
        """
        Submit a prompt and poll until an image URL is available.

        Returns:
            URL of the first generated image

        Raises:
            IllustrationError: job failed or a request failed
            IllustrationTimeoutError: still pending after max_poll_attempts checks
        """
        generation_id = await self.submit(prompt, negative_prompt)
        logger.info(f"Submitted generation {generation_id}")

        for attempt in range(1, self.max_poll_attempts + 1):
            status = await self.get_status(generation_id)

            if status.status == JobStatus.COMPLETE:
                if not status.image_urls:
                    raise IllustrationError(f"Generation {generation_id} completed without images")
                return status.image_urls[0]

            if status.status == JobStatus.FAILED:
                raise IllustrationError(f"Generation {generation_id} failed")

            logger.debug(
                f"Generation {generation_id} pending",
                extra={"attempt": attempt},
            )
            if attempt < self.max_poll_attempts:
                await asyncio.sleep(self.poll_interval)

        raise IllustrationTimeoutError(
            f"Generation {generation_id} timed out after {self.max_poll_attempts} checks"
        )
