"""Refresh orchestration: fetch policy gates and quote store updates."""

from __future__ import annotations

import itertools
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from QuoteLock.core.models import (
    SKIP_CONNECTIVITY,
    SKIP_INTERVAL,
    STAGE_UNEXPECTED,
    FetchOutcome,
    ParseFailure,
    ProviderDescriptor,
    Quote,
    RefreshResult,
    Skipped,
    Success,
)
from QuoteLock.storage.preferences import (
    PREF_QUOTES_LAST_UPDATE,
    PREF_QUOTES_SOURCE,
    PREF_QUOTES_TEXT,
)
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.storage.preferences import PreferenceArea


class QuoteProvider(Protocol):
    """Protocol for a remote quote source."""

    name: str

    def describe(self) -> ProviderDescriptor:
        """Return the provider's static fetch policy."""
        raise NotImplementedError

    def fetch(self) -> FetchOutcome:
        """Fetch and parse one quote.

        Must be safe to call repeatedly and from different threads. Expected
        failures are returned as ``ParseFailure`` / ``TransportFailure``.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Close resources held by the provider."""
        raise NotImplementedError


@dataclass(slots=True)
class RefreshOrchestrator:
    """Apply refresh policy around one provider and store successful quotes.

    Writes are guarded by a start sequence (last-started-wins): a fetch that
    completes after a newer fetch was already applied is discarded. No lock is
    held while the provider runs, so a stuck fetch never blocks other
    refreshes or store readers.

    ``extra_values`` contributes keys derived from the new quote (such as the
    ``collected`` flag) to the same write, so readers never see the new text
    paired with values that belong to the previous quote.
    """

    provider: QuoteProvider
    quote_area: PreferenceArea
    connectivity: Callable[[], bool | None] | None = None
    extra_values: Callable[[Quote], Mapping[str, Any]] | None = None
    clock: Callable[[], float] = time.time
    _sequence: itertools.count = field(default_factory=lambda: itertools.count(1))
    _applied_sequence: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def refresh(
        self,
        *,
        force: bool = False,
        last_fetch_timestamp: float | None = None,
        connected: bool | None = None,
    ) -> RefreshResult:
        """Run one refresh attempt.

        Args:
            force: User-initiated refresh; bypasses the interval gate only.
            last_fetch_timestamp: Epoch seconds of the last applied fetch;
                read from the quote area when omitted.
            connected: Known connectivity; probed when omitted. None means
                unknown and never blocks a fetch.

        Returns:
            The provider outcome, or ``Skipped`` when a policy gate applied.
        """
        descriptor = self.provider.describe()
        now = self.clock()

        if not force:
            last = last_fetch_timestamp if last_fetch_timestamp is not None else self._last_update()
            if last is not None and now - last < descriptor.min_refresh_interval:
                log.debug(
                    "Refresh skipped (interval): provider=%s elapsed=%.0fs min=%ds",
                    descriptor.name,
                    now - last,
                    descriptor.min_refresh_interval,
                )
                return Skipped(SKIP_INTERVAL)

        if descriptor.requires_connectivity:
            if connected is None and self.connectivity is not None:
                connected = self.connectivity()
            if connected is False:
                log.info("Refresh skipped (connectivity): provider=%s", descriptor.name)
                return Skipped(SKIP_CONNECTIVITY)

        with self._lock:
            sequence = next(self._sequence)

        log.debug("Fetching quote: provider=%s seq=%d force=%s", descriptor.name, sequence, force)
        try:
            outcome = self.provider.fetch()
        except Exception as e:  # noqa: BLE001 - provider failures must not escape
            log.warning("Provider raised unexpectedly: provider=%s error=%s", descriptor.name, e)
            return ParseFailure(stage=STAGE_UNEXPECTED, detail=str(e))

        if not isinstance(outcome, Success):
            log.warning("Refresh failed, keeping last quote: provider=%s outcome=%s", descriptor.name, outcome)
            return outcome

        self._apply(outcome.quote, sequence, now)
        return outcome

    def _apply(self, quote: Quote, sequence: int, fetched_at: float) -> bool:
        values: dict[str, Any] = {}
        if self.extra_values is not None:
            values.update(self.extra_values(quote))
        values.update(
            {
                PREF_QUOTES_TEXT: quote.text,
                PREF_QUOTES_SOURCE: quote.source,
                PREF_QUOTES_LAST_UPDATE: fetched_at,
            }
        )
        with self._lock:
            if sequence < self._applied_sequence:
                log.info(
                    "Discarding stale fetch result: seq=%d applied=%d",
                    sequence,
                    self._applied_sequence,
                )
                return False
            self.quote_area.update(values)
            # Only a committed write counts as applied.
            self._applied_sequence = sequence
        log.info("Quote updated: %s %s", quote.text, quote.source)
        return True

    def _last_update(self) -> float | None:
        value = self.quote_area.get(PREF_QUOTES_LAST_UPDATE)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)
