"""
Parser for the model's semi-structured story reply.

Expected shape (formatting markers and extra commentary are tolerated):

    Title: The Fox

    **Page 1**
    Content: A fox ran.
    Image Prompt: a fox in a forest

Rules:
1. The reply is split into blocks at page-header lines ("Page <n>", possibly
   wrapped in ** or prefixed with #). Text before the first header is the
   title block.
2. The title comes from a "Title:" line in the title block, else the default.
3. In each page block, a field's value is everything from its label to the
   next label or the end of the block.
4. Pages are numbered by position among the kept blocks, ignoring the number
   written in the header.
5. Blocks with an empty Content or Image Prompt are dropped.
"""

import logging
import re

from ..errors import ParseError
from ..types import Story, StoryPage

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Story"

PAGE_HEADER = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]*)?[*_]*[ \t]*page[ \t]*\d+[ \t]*[*_]*[ \t]*[:.\-]?[ \t]*[*_]*",
    re.IGNORECASE | re.MULTILINE,
)

TITLE_LINE = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]*)?[*_]*[ \t]*title[ \t]*[*_]*[ \t]*:[ \t]*(.*)$",
    re.IGNORECASE | re.MULTILINE,
)

FIELD_LABEL = re.compile(
    r"^[ \t]*(?:[-•][ \t]*)?[*_]*[ \t]*(content|image[ \t]*[-_]?[ \t]*prompt)[ \t]*[*_]*[ \t]*:[*_]*",
    re.IGNORECASE | re.MULTILINE,
)

_RULE_LINE = re.compile(r"^[-*_=\s]+$")
_QUOTE_PAIRS = {'"': '"', "'": "'", "“": "”"}


def _clean(value: str) -> str:
    """Collapse a field value to one line and strip surrounding formatting markers."""
    lines = [
        line.strip()
        for line in value.splitlines()
        if line.strip() and not _RULE_LINE.match(line)
    ]
    text = " ".join(lines).strip(" \t*_")

    # Remove wrapping quotes only when they enclose the whole value
    if len(text) >= 2 and _QUOTE_PAIRS.get(text[0]) == text[-1]:
        text = text[1:-1].strip()
    return text


def _field_key(label: str) -> str:
    return "content" if label.lower().startswith("content") else "image_prompt"


def split_blocks(raw_text: str) -> tuple[str, list[str]]:
    """Split the reply into (title block, [page blocks])."""
    headers = list(PAGE_HEADER.finditer(raw_text))
    if not headers:
        return raw_text, []

    title_block = raw_text[: headers[0].start()]
    page_blocks = []
    for i, header in enumerate(headers):
        end = headers[i + 1].start() if i + 1 < len(headers) else len(raw_text)
        page_blocks.append(raw_text[header.end():end])
    return title_block, page_blocks


def extract_title(title_block: str, default: str = DEFAULT_TITLE) -> str:
    """Return the first non-empty "Title:" value, or the default."""
    for match in TITLE_LINE.finditer(title_block):
        title = _clean(match.group(1))
        if title:
            return title
    return default


def extract_fields(block: str) -> dict[str, str]:
    """Return {"content": ..., "image_prompt": ...}; missing labels map to ""."""
    fields = {"content": "", "image_prompt": ""}
    labels = list(FIELD_LABEL.finditer(block))

    for i, label in enumerate(labels):
        end = labels[i + 1].start() if i + 1 < len(labels) else len(block)
        key = _field_key(label.group(1))
        # First occurrence of a label wins
        if not fields[key]:
            fields[key] = _clean(block[label.end():end])

    return fields


def parse_story(raw_text: str, default_title: str = DEFAULT_TITLE) -> Story:
    """
    Turn the raw model reply into a Story.

    Raises:
        ParseError: only when the reply is empty
    """
    if raw_text is None or not raw_text.strip():
        raise ParseError("Story reply was empty")

    title_block, page_blocks = split_blocks(raw_text)
    title = extract_title(title_block, default_title)

    pages = []
    for position, block in enumerate(page_blocks, start=1):
        fields = extract_fields(block)
        if not fields["content"] or not fields["image_prompt"]:
            logger.warning(
                f"Dropping page block {position}: missing "
                f"{'content' if not fields['content'] else 'image prompt'}"
            )
            continue

        pages.append(
            StoryPage(
                page_number=len(pages) + 1,
                content=fields["content"],
                image_prompt=fields["image_prompt"],
            )
        )

    if not pages:
        logger.warning(f"Parsed story '{title}' has no usable pages")

    return Story(title=title, pages=pages)


class StoryParser:
    """Narrow wrapper so the pipeline depends on parse(raw) -> Story only."""

    def __init__(self, default_title: str = DEFAULT_TITLE):
        self.default_title = default_title

    def parse(self, raw_text: str) -> Story:
        return parse_story(raw_text, self.default_title)
