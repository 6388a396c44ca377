"""
Module for illustrating story pages through the image-generation gateway.

Every page is illustrated concurrently and independently. A failed, timed
out or otherwise broken image job never fails the story: the page gets a
placeholder URL and ``image_status = failed`` instead.
"""

import asyncio
import logging
import random
import string
from dataclasses import replace
from typing import Callable, Optional

from bedtime_stories.config import IMAGE_CONSTANTS
from ..gateways.image_generation import ImageGenerationGateway
from ..types import ImageStatus, StoryPage

logger = logging.getLogger(__name__)


def enhance_prompt(
    image_prompt: str,
    style_prefix: str = IMAGE_CONSTANTS["style_prefix"],
    style_suffix: str = IMAGE_CONSTANTS["style_suffix"],
) -> str:
    """Wrap a page's image prompt with the fixed style qualifiers."""
    return f"{style_prefix}, {image_prompt}, {style_suffix}"


def _random_token(length: int = 8) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def placeholder_url(
    width: int = IMAGE_CONSTANTS["width"],
    height: int = IMAGE_CONSTANTS["height"],
) -> str:
    """Placeholder image URL; the random token keeps repeated failures visually distinct."""
    return IMAGE_CONSTANTS["placeholder_url"].format(
        width=width,
        height=height,
        token=_random_token(),
    )


class PageIllustrator:
    """
    Generate one illustration per story page.

    Args:
        gateway: Image-generation gateway (submit-and-poll)
        negative_prompt: Negative prompt sent with every page
        max_concurrency: Optional cap on simultaneous image jobs; None means
            one concurrent job per page
    """

    def __init__(
        self,
        gateway: ImageGenerationGateway,
        negative_prompt: str = IMAGE_CONSTANTS["negative_prompt"],
        max_concurrency: Optional[int] = None,
    ):
        self.gateway = gateway
        self.negative_prompt = negative_prompt
        self.max_concurrency = max_concurrency

    def _fallback(self, page: StoryPage) -> StoryPage:
        width = getattr(self.gateway, "width", IMAGE_CONSTANTS["width"])
        height = getattr(self.gateway, "height", IMAGE_CONSTANTS["height"])
        return replace(
            page,
            image_url=placeholder_url(width, height),
            image_status=ImageStatus.FAILED,
        )

    async def illustrate_page(self, page: StoryPage) -> StoryPage:
        """
        Illustrate a single page.

        Returns a new StoryPage; the input page is not modified. Never raises
        for image failures (cancellation still propagates).
        """
        prompt = enhance_prompt(page.image_prompt)

        try:
            image_url = await self.gateway.generate(prompt, self.negative_prompt)
        except Exception as e:
            logger.warning(
                f"Page {page.page_number} illustration failed, using placeholder: {e}",
                extra={"page_number": page.page_number, "error_type": type(e).__name__},
            )
            return self._fallback(page)

        logger.info(
            f"Page {page.page_number} illustrated",
            extra={"page_number": page.page_number},
        )
        return replace(page, image_url=image_url, image_status=ImageStatus.COMPLETE)

    async def illustrate(
        self,
        pages: list[StoryPage],
        timeout: Optional[float] = None,
        on_progress: Callable[[int, int], None] = None,
    ) -> list[StoryPage]:
        """
        Illustrate all pages concurrently.

        Args:
            pages: Parsed story pages
            timeout: Optional overall deadline in seconds; jobs still running
                when it passes are cancelled and their pages get placeholders
            on_progress: Optional callback(completed, total) after each page

        Returns:
            Pages in the same order with image_url and image_status set
        """
        total = len(pages)
        if total == 0:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        completed = 0

        async def illustrate_one(page: StoryPage) -> StoryPage:
            nonlocal completed
            if semaphore:
                async with semaphore:
                    result = await self.illustrate_page(page)
            else:
                result = await self.illustrate_page(page)

            completed += 1
            if on_progress:
                on_progress(completed, total)
            return result

        tasks = [asyncio.create_task(illustrate_one(page)) for page in pages]
        try:
            _, pending = await asyncio.wait(tasks, timeout=timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        if pending:
            logger.warning(f"Illustration deadline reached with {len(pending)} of {total} pages unfinished")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        # Results are read back by index so order never depends on completion order
        return [
            self._fallback(page) if task in pending else task.result()
            for page, task in zip(pages, tasks)
        ]
