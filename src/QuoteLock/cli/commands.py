"""Command implementations for QuoteLock CLI.

Encapsulates the behavior of each command, separated from CLI parameter
handling and component wiring.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime

from QuoteLock.cli.factories import AppComponents
from QuoteLock.core.models import CollectionResult, RefreshResult, Skipped, Success
from QuoteLock.display import DISPLAY_NAMESPACES
from QuoteLock.services import RefreshScheduler
from QuoteLock.sources.registry import supported_provider_names
from QuoteLock.storage.preferences import (
    PREF_QUOTES_COLLECTED,
    PREF_QUOTES_LAST_UPDATE,
    PREF_QUOTES_SOURCE,
    PREF_QUOTES_TEXT,
)
from QuoteLock.utils.log import log


class CommandError(RuntimeError):
    """Raised when a command cannot complete its action."""


@dataclass(slots=True)
class RefreshCommand:
    """Run one refresh and show the resulting display state."""

    components: AppComponents
    force: bool = False

    def execute(self) -> RefreshResult:
        result = self.components.orchestrator.refresh(force=self.force)
        if isinstance(result, Success):
            log.info("Refresh succeeded")
        elif isinstance(result, Skipped):
            log.info("Refresh skipped: %s", result.reason)
        else:
            log.warning("Refresh failed: %s", result)
        self.components.reconciler.reconcile()
        return result


@dataclass(slots=True)
class ShowCommand:
    """Render the stored quote once."""

    components: AppComponents

    def execute(self) -> None:
        self.components.reconciler.reconcile()


@dataclass(slots=True)
class CollectCommand:
    """Collect or uncollect the quote currently displayed.

    Goes through the dispatcher exactly like a tap on the collect icon.
    """

    components: AppComponents
    collected: bool

    def execute(self) -> CollectionResult:
        self.components.reconciler.reconcile()
        result = self.components.dispatcher.on_collect_tap(currently_selected=not self.collected)
        if result is None:
            raise CommandError("No quote to collect yet; run `refresh` first")
        if not result.ok:
            raise CommandError(f"Collection request rejected: {result.error}")
        self.components.reconciler.reconcile(reset_rail=False)
        return result


@dataclass(slots=True)
class CollectionsCommand:
    """List collected quotes, newest first."""

    components: AppComponents

    def execute(self) -> int:
        entries = self.components.collections.list_entries()
        if not entries:
            log.info("No collected quotes")
        for idx, (entry, collected_at) in enumerate(entries, start=1):
            log.info("%d. %s", idx, entry.text)
            if entry.source:
                log.info("   %s", entry.source)
            log.info("   Collected: %s", collected_at.strftime("%Y-%m-%d %H:%M"))
        return len(entries)


@dataclass(slots=True)
class ProvidersCommand:
    """List registered providers and mark the configured one."""

    components: AppComponents

    def execute(self) -> tuple[str, ...]:
        current = self.components.provider.describe()
        names = supported_provider_names()
        for name in names:
            marker = "*" if name == current.name else " "
            log.info("%s %s", marker, name)
        log.info(
            "Active: %s (min interval %ds, connectivity %s)",
            current.display_name,
            current.min_refresh_interval,
            "required" if current.requires_connectivity else "not required",
        )
        return names


@dataclass(slots=True)
class StatusCommand:
    """Report provider, stored quote and collection state."""

    components: AppComponents

    def execute(self) -> dict[str, object]:
        quotes = self.components.context.quote_area.snapshot()
        last_update = quotes.get(PREF_QUOTES_LAST_UPDATE)
        status = {
            "provider": self.components.provider.name,
            "has_quote": PREF_QUOTES_TEXT in quotes and PREF_QUOTES_SOURCE in quotes,
            "collected": quotes.get(PREF_QUOTES_COLLECTED) is True,
            "last_update": (
                datetime.fromtimestamp(last_update).strftime("%Y-%m-%d %H:%M:%S")
                if isinstance(last_update, (int, float))
                else None
            ),
            "collections": self.components.collections.count(),
        }
        for key, value in status.items():
            log.info("%s: %s", key, value)
        return status


@dataclass(slots=True)
class WatchCommand:
    """Keep the display in sync while refreshing on a schedule.

    Runs until interrupted, or for ``duration`` seconds when given.
    """

    components: AppComponents
    duration: float | None = None
    poll_interval: float = 1.0

    def execute(self) -> None:
        comps = self.components
        stream = comps.preferences.subscribe(*DISPLAY_NAMESPACES)
        scheduler = RefreshScheduler(
            comps.orchestrator,
            check_every=comps.config.refresh.check_every,
        )
        comps.reconciler.start(stream)
        scheduler.start()
        log.info("Watching quotes (provider=%s); press Ctrl+C to stop", comps.provider.name)
        deadline = None if self.duration is None else time.monotonic() + self.duration
        try:
            while deadline is None or time.monotonic() < deadline:
                comps.preferences.poll_external()
                time.sleep(self.poll_interval)
        except KeyboardInterrupt:
            log.info("Stopping watch")
        finally:
            scheduler.stop()
            comps.reconciler.stop()
