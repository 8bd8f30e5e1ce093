"""Wikiquote main page parser.

Extracts the featured quote from the first table cell of the page and splits
it into text and source on a dash separator.
"""

from __future__ import annotations

import html
import re

from QuoteLock.core.errors import QuoteParseError
from QuoteLock.core.models import (
    ATTRIBUTION_GLYPH,
    STAGE_LOCATE_BLOCK,
    STAGE_SPLIT_TEXT_SOURCE,
    Quote,
)

_CELL_RE = re.compile(r"(?<=<td>).*?(?=</td>)", re.DOTALL)
_TAG_RE = re.compile(r"<.*?>", re.DOTALL)
# Em-dash (single or double), double hyphen, or box-drawing dash (single or double).
_SPLIT_RE = re.compile(r"^(.*?)\s*(?:—{1,2}|--|─{1,2})\s*(.*?)$", re.DOTALL)


def parse_wikiquote_page(page: str) -> Quote:
    """Parse the featured quote out of a Wikiquote page.

    Args:
        page: Raw page markup.

    Returns:
        Quote with the source prefixed by the attribution glyph.

    Raises:
        QuoteParseError: With stage "locate content block" when no table cell
            exists, or "split text/source" when no dash separator is found.
    """
    cell = _CELL_RE.search(page)
    if cell is None:
        raise QuoteParseError(STAGE_LOCATE_BLOCK)

    content = html.unescape(_TAG_RE.sub("", cell.group(0))).strip()
    match = _SPLIT_RE.match(content)
    if match is None:
        raise QuoteParseError(STAGE_SPLIT_TEXT_SOURCE, detail=content[:80])

    text = match.group(1).strip()
    source = match.group(2).strip()
    if not text:
        raise QuoteParseError(STAGE_SPLIT_TEXT_SOURCE, detail="empty quote text")
    return Quote(text=text, source=f"{ATTRIBUTION_GLYPH}{source}")
