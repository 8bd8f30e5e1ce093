"""Quote-of-the-day feed parser.

Parses an RSS/Atom feed whose entries carry the quote in the description and
the author in the title (BrainyQuote style).
"""

from __future__ import annotations

import html
import re

import feedparser

from QuoteLock.core.errors import QuoteParseError
from QuoteLock.core.models import ATTRIBUTION_GLYPH, Quote

STAGE_LOCATE_ENTRY = "locate entry"
STAGE_READ_ENTRY = "read entry"

_TAG_RE = re.compile(r"<.*?>", re.DOTALL)
_QUOTE_CHARS = "\"'“”‘’「」『』 \t\r\n"


def _clean(value: str) -> str:
    return html.unescape(_TAG_RE.sub("", value or "")).strip()


def parse_quote_feed(xml_text: str) -> Quote:
    """Parse the first entry of a quote feed into a Quote.

    Args:
        xml_text: RSS or Atom document.

    Returns:
        Quote whose source is the entry title prefixed by the attribution glyph.

    Raises:
        QuoteParseError: With stage "locate entry" when the feed has no entries,
            or "read entry" when the first entry has no quote text.
    """
    feed = feedparser.parse(xml_text)
    if not feed.entries:
        detail = str(getattr(feed, "bozo_exception", "")) if feed.get("bozo") else ""
        raise QuoteParseError(STAGE_LOCATE_ENTRY, detail=detail)

    entry = feed.entries[0]
    text = _clean(entry.get("summary") or entry.get("description") or "").strip(_QUOTE_CHARS)
    if not text:
        raise QuoteParseError(STAGE_READ_ENTRY, detail="entry has no description")

    author = _clean(entry.get("title") or "")
    source = f"{ATTRIBUTION_GLYPH}{author}" if author else ""
    return Quote(text=text, source=source)
