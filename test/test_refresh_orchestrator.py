"""Tests for refresh policy gates, store writes and the stale-write guard."""

import sqlite3
import sys
import tempfile
import threading
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QuoteLock.core.models import (
    ParseFailure,
    ProviderDescriptor,
    Quote,
    Skipped,
    Success,
    TransportFailure,
)
from QuoteLock.services.refresh import RefreshOrchestrator
from QuoteLock.services.scheduler import RefreshScheduler
from QuoteLock.storage.db import DatabaseManager
from QuoteLock.storage.preferences import PreferenceStore

DAY = 86400


class _StubProvider:
    def __init__(self, outcomes, *, min_interval: int = DAY, requires_connectivity: bool = True):
        self.outcomes = list(outcomes)
        self.min_interval = min_interval
        self.requires_connectivity = requires_connectivity
        self.name = "stub"
        self.fetch_count = 0

    def describe(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            display_name="Stub",
            min_refresh_interval=self.min_interval,
            requires_connectivity=self.requires_connectivity,
        )

    def fetch(self):
        self.fetch_count += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


class _Clock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseManager(Path(self._tmpdir.name) / "quotes.db")
        self.store = PreferenceStore(self.db)
        self.quotes = self.store.area("quotes")
        self.clock = _Clock()

    def tearDown(self) -> None:
        self.db.close()
        self._tmpdir.cleanup()

    def _orchestrator(self, provider, **kwargs) -> RefreshOrchestrator:
        return RefreshOrchestrator(provider=provider, quote_area=self.quotes, clock=self.clock, **kwargs)


class TestRefreshGates(_StoreTestCase):
    def test_success_writes_quote_atomically(self) -> None:
        stream = self.store.subscribe("quotes")
        provider = _StubProvider([Success(Quote("Q1", "―A"))])
        result = self._orchestrator(provider).refresh()

        self.assertEqual(result, Success(Quote("Q1", "―A")))
        self.assertEqual(
            self.quotes.snapshot(),
            {"text": "Q1", "source": "―A", "last_update": self.clock.now},
        )
        event = stream.get(timeout=1)
        self.assertEqual(set(event.keys), {"text", "source", "last_update"})
        self.assertIsNone(stream.get(timeout=0.05))
        stream.close()

    def test_interval_gate_skips_and_keeps_quote(self) -> None:
        provider = _StubProvider([Success(Quote("Q1", "―A")), Success(Quote("Q2", "―B"))])
        orchestrator = self._orchestrator(provider)
        orchestrator.refresh()
        self.clock.now += DAY - 1

        result = orchestrator.refresh()

        self.assertEqual(result, Skipped("interval"))
        self.assertEqual(provider.fetch_count, 1)
        self.assertEqual(self.quotes.get("text"), "Q1")

    def test_interval_elapsed_fetches_again(self) -> None:
        provider = _StubProvider([Success(Quote("Q1")), Success(Quote("Q2"))])
        orchestrator = self._orchestrator(provider)
        orchestrator.refresh()
        self.clock.now += DAY
        self.assertIsInstance(orchestrator.refresh(), Success)
        self.assertEqual(self.quotes.get("text"), "Q2")

    def test_explicit_last_fetch_timestamp(self) -> None:
        provider = _StubProvider([Success(Quote("Q1"))])
        result = self._orchestrator(provider).refresh(last_fetch_timestamp=self.clock.now - 10)
        self.assertEqual(result, Skipped("interval"))
        self.assertEqual(provider.fetch_count, 0)

    def test_force_bypasses_interval_only(self) -> None:
        provider = _StubProvider([Success(Quote("Q1")), Success(Quote("Q2"))])
        orchestrator = self._orchestrator(provider)
        orchestrator.refresh()

        self.assertIsInstance(orchestrator.refresh(force=True), Success)
        self.assertEqual(self.quotes.get("text"), "Q2")
        self.assertEqual(orchestrator.refresh(force=True, connected=False), Skipped("connectivity"))

    def test_connectivity_gate(self) -> None:
        provider = _StubProvider([Success(Quote("Q1"))])
        orchestrator = self._orchestrator(provider, connectivity=lambda: False)
        self.assertEqual(orchestrator.refresh(), Skipped("connectivity"))
        self.assertEqual(provider.fetch_count, 0)
        self.assertEqual(self.quotes.snapshot(), {})

    def test_unknown_connectivity_does_not_block(self) -> None:
        provider = _StubProvider([Success(Quote("Q1"))])
        orchestrator = self._orchestrator(provider, connectivity=lambda: None)
        self.assertIsInstance(orchestrator.refresh(), Success)

    def test_offline_provider_ignores_connectivity(self) -> None:
        provider = _StubProvider([Success(Quote("Q1"))], requires_connectivity=False)
        self.assertIsInstance(self._orchestrator(provider).refresh(connected=False), Success)

    def test_failures_leave_store_untouched(self) -> None:
        self.quotes.update({"text": "Old", "source": "―Old", "last_update": 0})
        outcomes = [
            ParseFailure("split text/source"),
            TransportFailure("timeout"),
            RuntimeError("boom"),
        ]
        provider = _StubProvider(outcomes, min_interval=0)
        orchestrator = self._orchestrator(provider)

        self.assertEqual(orchestrator.refresh(), ParseFailure("split text/source"))
        self.assertEqual(orchestrator.refresh(), TransportFailure("timeout"))
        unexpected = orchestrator.refresh()
        self.assertIsInstance(unexpected, ParseFailure)
        self.assertEqual(unexpected.stage, "unexpected error")
        self.assertEqual(self.quotes.snapshot(), {"text": "Old", "source": "―Old", "last_update": 0})

    def test_extra_values_written_with_quote(self) -> None:
        stream = self.store.subscribe("quotes")
        self.quotes.update({"text": "A", "source": "―X", "collected": True})
        stream.get(timeout=1)
        provider = _StubProvider([Success(Quote("B", "―Y"))])
        orchestrator = self._orchestrator(provider, extra_values=lambda quote: {"collected": quote.text == "A"})

        orchestrator.refresh()

        event = stream.get(timeout=1)
        self.assertEqual(set(event.keys), {"text", "source", "last_update", "collected"})
        self.assertIsNone(stream.get(timeout=0.05))
        self.assertIs(self.quotes.get("collected"), False)
        stream.close()

    def test_extra_values_cannot_override_quote(self) -> None:
        provider = _StubProvider([Success(Quote("Q1", "―A"))])
        orchestrator = self._orchestrator(provider, extra_values=lambda quote: {"text": "other"})
        orchestrator.refresh()
        self.assertEqual(self.quotes.get("text"), "Q1")


class _BlockingProvider(_StubProvider):
    """Provider whose first fetch blocks until released."""

    def __init__(self):
        super().__init__([], min_interval=0)
        self.first_started = threading.Event()
        self.release_first = threading.Event()
        self._calls = 0
        self._lock = threading.Lock()

    def fetch(self):
        with self._lock:
            self._calls += 1
            call = self._calls
        if call == 1:
            self.first_started.set()
            self.release_first.wait(5)
            return Success(Quote("stale"))
        return Success(Quote("fresh"))


class _FlakyArea:
    """Quote area whose first update fails like a locked database."""

    def __init__(self, area):
        self.area = area
        self.failures = 1

    def get(self, key, default=None):
        return self.area.get(key, default)

    def update(self, values):
        if self.failures:
            self.failures -= 1
            raise sqlite3.OperationalError("database is locked")
        return self.area.update(values)


class TestStaleWriteGuard(_StoreTestCase):
    def _run_background(self, orchestrator, results) -> threading.Thread:
        background = threading.Thread(target=lambda: results.setdefault("bg", orchestrator.refresh()))
        background.start()
        return background

    def test_late_older_fetch_is_discarded(self) -> None:
        provider = _BlockingProvider()
        orchestrator = self._orchestrator(provider)

        results = {}
        background = self._run_background(orchestrator, results)
        self.assertTrue(provider.first_started.wait(5))

        # A user refresh starts after the background one and finishes first.
        self.assertEqual(orchestrator.refresh(force=True), Success(Quote("fresh")))
        stream = self.store.subscribe("quotes")
        provider.release_first.set()
        background.join(5)

        self.assertEqual(results["bg"], Success(Quote("stale")))
        self.assertEqual(self.quotes.get("text"), "fresh")
        self.assertIsNone(stream.get(timeout=0.05))
        stream.close()

    def test_failed_write_does_not_block_older_fetch(self) -> None:
        provider = _BlockingProvider()
        orchestrator = RefreshOrchestrator(provider=provider, quote_area=_FlakyArea(self.quotes), clock=self.clock)

        results = {}
        background = self._run_background(orchestrator, results)
        self.assertTrue(provider.first_started.wait(5))

        with self.assertRaises(sqlite3.OperationalError):
            orchestrator.refresh(force=True)
        provider.release_first.set()
        background.join(5)

        self.assertEqual(results["bg"], Success(Quote("stale")))
        self.assertEqual(self.quotes.get("text"), "stale")


class TestRefreshScheduler(_StoreTestCase):
    def test_tick_logs_errors_and_continues(self) -> None:
        class _Failing:
            def __init__(self):
                self.calls = 0

            def refresh(self):
                self.calls += 1
                raise RuntimeError("store locked")

        orchestrator = _Failing()
        scheduler = RefreshScheduler(orchestrator, check_every=60)
        with self.assertLogs("QuoteLock", level="ERROR"):
            scheduler.tick()
        scheduler.tick()
        self.assertEqual(orchestrator.calls, 2)

    def test_start_refreshes_immediately(self) -> None:
        provider = _StubProvider([Success(Quote("Q1"))])
        orchestrator = self._orchestrator(provider)
        stream = self.store.subscribe("quotes")
        scheduler = RefreshScheduler(orchestrator, check_every=3600)
        scheduler.start()
        self.assertIsNotNone(stream.get(timeout=5))
        stream.close()
        scheduler.stop()
        self.assertFalse(scheduler.running)
        self.assertEqual(self.quotes.get("text"), "Q1")


if __name__ == "__main__":
    unittest.main()
