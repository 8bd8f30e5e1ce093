from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Optional

ATTRIBUTION_GLYPH = "―"

STAGE_LOCATE_BLOCK = "locate content block"
STAGE_SPLIT_TEXT_SOURCE = "split text/source"
STAGE_UNEXPECTED = "unexpected error"

SKIP_INTERVAL = "interval"
SKIP_CONNECTIVITY = "connectivity"

PHASE_PLACEHOLDER = "placeholder"
PHASE_SHOWING = "showing"


@dataclass(frozen=True, slots=True)
class Quote:
    """Normalized quote produced by a successful provider fetch.

    Attributes:
        text: Quote body. Never blank.
        source: Attribution line, possibly empty.
    """

    text: str
    source: str = ""

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("Quote text must not be blank")


@dataclass(frozen=True, slots=True)
class ProviderDescriptor:
    """Static fetch policy of a quote provider.

    Attributes:
        name: Registry identifier (e.g. "wikiquote").
        display_name: Human-readable provider name.
        min_refresh_interval: Minimum seconds between scheduled fetches.
        requires_connectivity: Whether fetching needs network access.
        config_surface: Optional reference to a provider settings surface.
    """

    name: str
    display_name: str
    min_refresh_interval: int
    requires_connectivity: bool
    config_surface: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Success:
    quote: Quote


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """Markup or payload did not have the expected shape.

    Attributes:
        stage: Parsing step that failed, for diagnostics only.
        detail: Optional extra context.
    """

    stage: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class TransportFailure:
    cause: str


@dataclass(frozen=True, slots=True)
class Skipped:
    """Refresh was not attempted because of policy (not an error)."""

    reason: str


FetchOutcome = Success | ParseFailure | TransportFailure
RefreshResult = Success | ParseFailure | TransportFailure | Skipped


@dataclass(frozen=True, slots=True)
class DisplayState:
    """Everything the rendering surface needs for one frame.

    Derived from the quote area, the collection flag and the font settings;
    never stored.

    Attributes:
        quote_text: Text line (quote or placeholder prompt).
        source_text: Source line (attribution or placeholder prompt).
        source_visible: Whether the source line is shown at all.
        collect_icon_visible: Whether the collect affordance is shown.
        collect_icon_selected: Whether the collect affordance is selected.
        layout_offset: Rail offset implied by the visible affordances.
        text_size: Font size of the quote line.
        source_size: Font size of the source line.
        font_path: Font file to use, or None for the built-in font.
    """

    quote_text: str
    source_text: str
    source_visible: bool
    collect_icon_visible: bool
    collect_icon_selected: bool
    layout_offset: float
    text_size: int
    source_size: int
    font_path: Optional[str] = None

    @property
    def phase(self) -> str:
        return PHASE_SHOWING if self.collect_icon_visible else PHASE_PLACEHOLDER


@dataclass(frozen=True, slots=True)
class CollectionEntry:
    text: str
    source: str
    fingerprint: str


@dataclass(frozen=True, slots=True)
class CollectionResult:
    """Outcome of a collection insert/delete request.

    Attributes:
        ok: Whether the store accepted the request.
        value: Row id for inserts, affected row count for deletes.
        error: Rejection reason when ``ok`` is False.
    """

    ok: bool
    value: int = 0
    error: Optional[str] = None

    @classmethod
    def accepted(cls, value: int) -> CollectionResult:
        return cls(ok=True, value=value)

    @classmethod
    def rejected(cls, error: str) -> CollectionResult:
        return cls(ok=False, value=-1, error=error)

    @classmethod
    def from_code(cls, code: int) -> CollectionResult:
        """Map a numeric store result where negative values mean rejection."""
        if code < 0:
            return cls.rejected(f"store returned {code}")
        return cls.accepted(code)


def strip_attribution(source: str) -> str:
    """Remove the attribution glyph added by providers."""
    return source.replace(ATTRIBUTION_GLYPH, "").strip()


def quote_fingerprint(text: str, source: str) -> str:
    """Return the md5 hex digest of ``text + source``."""
    return hashlib.md5(f"{text}{source}".encode("utf-8")).hexdigest()


def build_collection_entry(text: str, source: str) -> CollectionEntry:
    """Build the collection entry for a displayed quote.

    The attribution glyph is stripped first so the same quote always maps to
    the same fingerprint regardless of how its source was decorated.
    """
    clean_source = strip_attribution(source or "")
    return CollectionEntry(
        text=text,
        source=clean_source,
        fingerprint=quote_fingerprint(text, clean_source),
    )
