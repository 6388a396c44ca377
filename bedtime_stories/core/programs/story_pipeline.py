"""
Main program for generating an illustrated bedtime story.

Photo-driven workflow:
1. Describe the child from their photo (one vision call)
2. Write the story with that description embedded in every image prompt
3. Parse the reply into pages
4. Illustrate all pages concurrently, falling back to placeholders

Text-only workflow skips step 1 and uses a description built from the
child's name, age and gender (gender defaults to "child" there).

Image prompts that lost the description on the way through the model get
it prefixed back, so every illustration request carries it verbatim.

Failures in steps 1-3 abort the run. Step 4 never does.
"""

import logging
import time
from typing import Callable, Optional

from bedtime_stories.config import STORY_CONSTANTS, PipelineConfig
from ..errors import ValidationError
from ..gateways.image_generation import ImageGenerationGateway
from ..gateways.text_completion import TextCompletionGateway
from ..modules.character_extractor import CharacterExtractor
from ..modules.page_illustrator import PageIllustrator
from ..modules.story_generator import StoryTextGenerator
from ..modules.story_parser import StoryParser
from ..types import Story, StoryPage, StoryRequest, build_fallback_description

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, int, int], None]


def anchor_description(pages: list[StoryPage], description: str) -> int:
    """
    Prefix the character description to image prompts that do not contain it.

    Returns:
        Number of prompts that were rewritten
    """
    rewritten = 0
    for page in pages:
        if description not in page.image_prompt:
            page.image_prompt = f"{description}, {page.image_prompt}"
            rewritten += 1
    return rewritten


class StoryPipeline:
    """
    Complete story generation pipeline.

    Gateways are passed in explicitly so tests (and alternative providers)
    can substitute their own. Individual stages may also be overridden.

    Args:
        text_gateway: Text-completion gateway (vision-capable model)
        image_gateway: Image-generation gateway
        config: Pipeline knobs; defaults to PipelineConfig()
    """

    def __init__(
        self,
        text_gateway: TextCompletionGateway,
        image_gateway: ImageGenerationGateway,
        config: PipelineConfig = None,
        extractor: CharacterExtractor = None,
        generator: StoryTextGenerator = None,
        parser: StoryParser = None,
        illustrator: PageIllustrator = None,
    ):
        self.config = config or PipelineConfig()
        self.extractor = extractor or CharacterExtractor(
            text_gateway,
            strict=self.config.strict_attributes,
            temperature=STORY_CONSTANTS["vision_temperature"],
            max_tokens=STORY_CONSTANTS["vision_max_tokens"],
        )
        self.generator = generator or StoryTextGenerator(
            text_gateway,
            page_count=self.config.page_count,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )
        self.parser = parser or StoryParser(STORY_CONSTANTS["default_title"])
        self.illustrator = illustrator or PageIllustrator(
            image_gateway,
            max_concurrency=self.config.max_concurrency,
        )

    def prepare_request(
        self,
        child_name: Optional[str],
        age,
        gender: Optional[str] = None,
        photo: Optional[bytes] = None,
        photo_mime_type: Optional[str] = None,
        require_photo: bool = None,
    ) -> StoryRequest:
        """
        Validate raw inputs and build a StoryRequest.

        Args:
            require_photo: Whether this request is photo-driven. Defaults to
                config.photo_driven.

        Raises:
            ValidationError: if a required field is missing or malformed
        """
        if require_photo is None:
            require_photo = self.config.photo_driven

        child_name = (child_name or "").strip()
        if not child_name:
            raise ValidationError("Child's name is required", field="childName")

        age_text = str(age).strip() if age is not None else ""
        if not age_text:
            raise ValidationError("Age is required", field="age")
        try:
            age_value = int(age_text)
        except ValueError:
            raise ValidationError("Age must be a whole number", field="age") from None
        if age_value < STORY_CONSTANTS["min_age"]:
            raise ValidationError(f"Age must be at least {STORY_CONSTANTS['min_age']}", field="age")
        if self.config.max_age is not None and age_value > self.config.max_age:
            raise ValidationError(
                f"Age must be between {STORY_CONSTANTS['min_age']} and {self.config.max_age}",
                field="age",
            )

        gender = (gender or "").strip()
        if not gender:
            if require_photo:
                raise ValidationError("Gender is required", field="gender")
            gender = STORY_CONSTANTS["default_gender"]

        if photo is not None and len(photo) == 0:
            photo = None
        if photo is None:
            if require_photo:
                raise ValidationError("A photo of the child is required", field="image")
        elif not (photo_mime_type or "").startswith("image/"):
            raise ValidationError("The uploaded file must be an image", field="image")

        return StoryRequest(
            child_name=child_name,
            age=age_value,
            gender=gender,
            photo=photo,
            photo_mime_type=photo_mime_type if photo is not None else None,
        )

    def _stage_done(self, stage: str, started: float, request_id: str = None) -> None:
        logger.info(
            f"Stage completed: {stage}",
            extra={
                "request_id": request_id,
                "stage": stage,
                "duration": round(time.monotonic() - started, 2),
            },
        )

    async def run(
        self,
        request: StoryRequest,
        request_id: str = None,
        on_progress: ProgressCallback = None,
    ) -> Story:
        """
        Generate an illustrated story.

        Args:
            request: Validated personalization inputs
            request_id: Correlation id for logs
            on_progress: Optional callback(stage, detail, completed, total)

        Raises:
            ExtractionError, CompletionError, ParseError: fatal stage failures
        """
        def progress(stage: str, detail: str, completed: int = 0, total: int = 0):
            if on_progress:
                on_progress(stage, detail, completed, total)

        # 1. Character description
        started = time.monotonic()
        if request.photo is not None:
            progress("character", "Looking at the photo...")
            description = await self.extractor.extract(request.photo, request.photo_mime_type)
        else:
            description = build_fallback_description(request.child_name, request.age, request.gender)
        self._stage_done("character", started, request_id)

        # 2. Story text
        started = time.monotonic()
        progress("story", f"Writing a story for {request.child_name}...")
        raw_text = await self.generator.generate(
            child_name=request.child_name,
            age=request.age,
            gender=request.gender,
            character_description=description,
        )
        self._stage_done("story", started, request_id)

        # 3. Parse
        story = self.parser.parse(raw_text)
        if story.page_count < self.config.page_count:
            logger.warning(
                f"Requested {self.config.page_count} pages, parsed {story.page_count}",
                extra={"request_id": request_id, "stage": "parse"},
            )
        rewritten = anchor_description(story.pages, description)
        if rewritten:
            logger.info(
                f"Added character description to {rewritten} image prompts",
                extra={"request_id": request_id, "stage": "parse"},
            )

        # 4. Illustrations (never fatal)
        if self.config.illustrate and story.pages:
            started = time.monotonic()
            progress("illustrations", f"Illustrating {story.page_count} pages...", 0, story.page_count)
            story.pages = await self.illustrator.illustrate(
                story.pages,
                timeout=self.config.request_timeout,
                on_progress=lambda done, total: progress(
                    "illustrations", f"Illustrated {done} of {total} pages", done, total
                ),
            )
            self._stage_done("illustrations", started, request_id)

        return story
