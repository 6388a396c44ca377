"""
Module for turning a child's photo into a reusable character description.

Photo-driven workflow: before the story is written, a vision-capable model
reports the child's visible features as ``Key: Value`` lines. Those are
folded into one sentence that is embedded verbatim in every page's image
prompt, which is what keeps the illustrations consistent.
"""

import logging
import re

from ..errors import CompletionError, ExtractionError
from ..gateways.text_completion import TextCompletionGateway
from ..prompts.character_attributes import ATTRIBUTE_LABELS, build_attribute_messages
from ..types import CRITICAL_ATTRIBUTES, CharacterAttributes

logger = logging.getLogger(__name__)

# Markdown noise the model sometimes wraps around keys and values
_STRIP_CHARS = " \t*_`\"'"
_BULLET = re.compile(r"^\s*(?:[-•]|\d+[.)])\s*")


def _normalize_key(key: str) -> str:
    return re.sub(r"[^a-z]", "", key.lower().replace("colour", "color"))


# "Hair Color", "hair colour", "HAIR_COLOR" and "haircolor" all map to hair_color
_KEY_ALIASES = {_normalize_key(label): slot for slot, label in ATTRIBUTE_LABELS.items()}
_KEY_ALIASES.update({
    _normalize_key("hair style"): "hairstyle",
    _normalize_key("hair"): "hairstyle",
    _normalize_key("skin"): "skin_tone",
    _normalize_key("skin color"): "skin_tone",
    _normalize_key("accessory"): "accessories",
    _normalize_key("top"): "upper_garment",
    _normalize_key("top color"): "upper_garment_color",
    _normalize_key("bottom"): "lower_garment",
    _normalize_key("bottom color"): "lower_garment_color",
    _normalize_key("expression"): "facial_expression",
})


def parse_attribute_lines(raw_output: str) -> dict[str, str]:
    """
    Parse ``Key: Value`` lines into a slot -> value mapping.

    Lenient: lines without a colon, with an empty key or value, or with a key
    that names no known slot are skipped, so commentary around the answer
    does not abort parsing. The first occurrence of a slot wins.
    """
    attributes = {}

    for line in raw_output.splitlines():
        line = _BULLET.sub("", line.strip())
        if ":" not in line:
            continue

        key, value = line.split(":", 1)
        key = key.strip(_STRIP_CHARS)
        value = value.strip(_STRIP_CHARS).rstrip(".")
        if not key or not value:
            continue

        slot = _KEY_ALIASES.get(_normalize_key(key))
        if slot and slot not in attributes:
            attributes[slot] = value

    return attributes


class CharacterExtractor:
    """
    Extract a character description from a photo.

    Args:
        gateway: Text-completion gateway with a vision-capable model
        strict: If True, replies missing any critical slot (hairstyle, hair
            color, skin tone) are rejected instead of defaulted
        temperature: Sampling temperature for the vision call
        max_tokens: Token bound for the vision reply
    """

    def __init__(
        self,
        gateway: TextCompletionGateway,
        strict: bool = False,
        temperature: float = 0.2,
        max_tokens: int = 400,
    ):
        self.gateway = gateway
        self.strict = strict
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_attributes(self, raw_output: str) -> CharacterAttributes:
        """Turn the raw vision reply into CharacterAttributes."""
        parsed = parse_attribute_lines(raw_output)
        if not parsed:
            raise ExtractionError(f"No attribute lines in vision reply: {raw_output[:200]!r}")

        missing = [slot for slot in CharacterAttributes.slot_names() if slot not in parsed]
        if missing:
            missing_critical = [slot for slot in CRITICAL_ATTRIBUTES if slot in missing]
            if self.strict and missing_critical:
                raise ExtractionError(f"Vision reply missing critical attributes: {missing_critical}")
            logger.info(f"Defaulting missing character attributes: {missing}")

        return CharacterAttributes.from_mapping(parsed)

    async def extract(self, photo_bytes: bytes, mime_type: str) -> str:
        """
        Describe the child in the photo.

        Args:
            photo_bytes: Raw image bytes
            mime_type: MIME type of the image (e.g. image/jpeg)

        Returns:
            The character description sentence

        Raises:
            ExtractionError: if the vision call fails or yields no usable attributes
        """
        messages = build_attribute_messages(photo_bytes, mime_type)

        try:
            raw_output = await self.gateway.complete(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except CompletionError as e:
            raise ExtractionError(f"Vision call failed: {e.detail}") from e

        attributes = self.build_attributes(raw_output or "")
        description = attributes.to_description()
        logger.info(f"Character description: {description}")
        return description
