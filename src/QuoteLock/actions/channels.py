"""Channels carrying user actions to the refresh and collection back ends."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Protocol

from QuoteLock.core.models import CollectionEntry, CollectionResult, RefreshResult
from QuoteLock.services.collection import is_current_quote
from QuoteLock.storage.preferences import PREF_QUOTES_COLLECTED
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.services.refresh import RefreshOrchestrator
    from QuoteLock.storage.preferences import PreferenceArea
    from QuoteLock.storage.quote_collections import QuoteCollectionStore


class RefreshChannel(Protocol):
    """Fire-and-forget refresh trigger."""

    def trigger(self, on_done: Callable[[RefreshResult | None], None] | None = None) -> None:
        """Request a forced refresh; a new quote arrives through the store.

        Args:
            on_done: Called once the refresh finished, with its result or None
                when it raised. The caller never waits for it.
        """
        raise NotImplementedError


class CollectionChannel(Protocol):
    """Request/response channel to the collection store."""

    def insert(self, entry: CollectionEntry) -> CollectionResult:
        raise NotImplementedError

    def delete(self, fingerprint: str) -> CollectionResult:
        raise NotImplementedError


class LocalRefreshChannel:
    """Run forced refreshes on a worker pool so callers never block on the network."""

    def __init__(self, orchestrator: RefreshOrchestrator, *, max_workers: int = 2) -> None:
        self.orchestrator = orchestrator
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="quotelock-trigger")

    def trigger(self, on_done: Callable[[RefreshResult | None], None] | None = None) -> None:
        future = self._executor.submit(self.orchestrator.refresh, force=True)
        future.add_done_callback(partial(self._finished, on_done))

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool, optionally waiting for running refreshes."""
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _finished(on_done: Callable[[RefreshResult | None], None] | None, future: Future) -> None:
        error = future.exception()
        result = None
        if error is not None:
            log.error("Triggered refresh failed: %s", error)
        else:
            result = future.result()
            log.debug("Triggered refresh finished: %s", result)
        if on_done is None:
            return
        try:
            on_done(result)
        except Exception as e:  # noqa: BLE001 - runs on a worker thread
            log.error("Refresh completion callback failed: %s", e)


class LocalCollectionChannel:
    """Collection channel backed by the local collection table.

    After an accepted request the quote area's ``collected`` flag is updated
    when the entry belongs to the quote currently stored.
    """

    def __init__(self, collections: QuoteCollectionStore, quote_area: PreferenceArea) -> None:
        self.collections = collections
        self.quote_area = quote_area

    def insert(self, entry: CollectionEntry) -> CollectionResult:
        result = self.collections.insert(entry)
        if result.ok and is_current_quote(self.quote_area, entry.fingerprint):
            self.quote_area.set(PREF_QUOTES_COLLECTED, True)
        return result

    def delete(self, fingerprint: str) -> CollectionResult:
        result = self.collections.delete(fingerprint)
        if result.ok and is_current_quote(self.quote_area, fingerprint):
            self.quote_area.set(PREF_QUOTES_COLLECTED, False)
        return result
