"""Keep the quote area's ``collected`` flag in line with the collection table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from QuoteLock.core.models import build_collection_entry
from QuoteLock.storage.preferences import (
    PREF_QUOTES_COLLECTED,
    PREF_QUOTES_SOURCE,
    PREF_QUOTES_TEXT,
)

if TYPE_CHECKING:
    from QuoteLock.core.models import Quote
    from QuoteLock.storage.preferences import PreferenceArea
    from QuoteLock.storage.quote_collections import QuoteCollectionStore


def collected_values(collections: QuoteCollectionStore, quote: Quote) -> dict[str, Any]:
    """Return the ``collected`` flag for a quote about to be stored.

    The orchestrator merges the result into the quote write, so the text and
    its flag always change together.
    """
    entry = build_collection_entry(quote.text, quote.source)
    return {PREF_QUOTES_COLLECTED: collections.contains(entry.fingerprint)}


def is_current_quote(quote_area: PreferenceArea, fingerprint: str) -> bool:
    """Return whether ``fingerprint`` belongs to the quote currently stored."""
    snapshot = quote_area.snapshot()
    text = snapshot.get(PREF_QUOTES_TEXT)
    if not isinstance(text, str) or not text.strip():
        return False
    source = snapshot.get(PREF_QUOTES_SOURCE)
    return build_collection_entry(text, source if isinstance(source, str) else "").fingerprint == fingerprint
