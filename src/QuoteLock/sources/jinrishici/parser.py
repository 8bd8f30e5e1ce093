"""Jinrishici API payload parsers."""

from __future__ import annotations

from typing import Any

from QuoteLock.core.errors import QuoteParseError
from QuoteLock.core.models import ATTRIBUTION_GLYPH, Quote

STAGE_TOKEN = "token"
STAGE_STATUS = "status"
STAGE_CONTENT = "content"


def parse_token_payload(payload: Any) -> str:
    """Extract the user token from a token endpoint response.

    Raises:
        QuoteParseError: When the payload carries no token.
    """
    token = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise QuoteParseError(STAGE_TOKEN, detail="token response has no data")
    return token.strip()


def parse_sentence_payload(payload: Any) -> Quote:
    """Map a sentence endpoint response into a Quote.

    The source reads ``―{dynasty}·{author} 《{title}》``; missing parts are
    skipped.

    Raises:
        QuoteParseError: With stage "status" when the API reports an error, or
            "content" when the sentence is missing.
    """
    if not isinstance(payload, dict):
        raise QuoteParseError(STAGE_STATUS, detail="response is not an object")
    status = payload.get("status")
    if status != "success":
        raise QuoteParseError(STAGE_STATUS, detail=f"errcode={payload.get('errcode')}")

    data = payload.get("data")
    content = data.get("content") if isinstance(data, dict) else None
    text = content.strip() if isinstance(content, str) else ""
    if not text:
        raise QuoteParseError(STAGE_CONTENT, detail="empty content")

    origin = data.get("origin")
    if origin is None:
        origin = {}
    elif not isinstance(origin, dict):
        raise QuoteParseError(STAGE_CONTENT, detail="origin is not an object")
    dynasty = _origin_field(origin, "dynasty")
    author = _origin_field(origin, "author")
    title = _origin_field(origin, "title")

    source = "·".join(part for part in (dynasty, author) if part)
    if title:
        source = f"{source} 《{title}》" if source else f"《{title}》"
    if source:
        source = f"{ATTRIBUTION_GLYPH}{source}"
    return Quote(text=text, source=source)


def _origin_field(origin: dict[str, Any], key: str) -> str:
    value = origin.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise QuoteParseError(STAGE_CONTENT, detail=f"origin.{key} is not a string")
    return value.strip()
