"""Tests for quote providers and the shared HTTP client (network stubbed)."""

import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QuoteLock.core.models import ParseFailure, Quote, Success, TransportFailure
from QuoteLock.sources.feed.source import FeedProvider
from QuoteLock.sources.http import QuoteHttpClient
from QuoteLock.sources.jinrishici.source import (
    JINRISHICI_SENTENCE_URL,
    JINRISHICI_TOKEN_URL,
    PREF_JINRISHICI_TOKEN,
    JinrishiciProvider,
)
from QuoteLock.sources.registry import build_provider, supported_provider_names
from QuoteLock.sources.wikiquote.source import WikiquoteProvider
from QuoteLock.storage.db import DatabaseManager
from QuoteLock.storage.preferences import PreferenceStore


class _StubClient:
    """Minimal stand-in for QuoteHttpClient returning canned bodies."""

    def __init__(self, text=None, json_by_url=None, error=None):
        self.text = text
        self.json_by_url = json_by_url or {}
        self.error = error
        self.calls: list[tuple[str, dict | None]] = []
        self.closed = False

    def fetch_text(self, url, *, headers=None):
        self.calls.append((url, headers))
        if self.error is not None:
            raise self.error
        return self.text

    def fetch_json(self, url, *, headers=None):
        self.calls.append((url, headers))
        if self.error is not None:
            raise self.error
        value = self.json_by_url[url]
        if isinstance(value, Exception):
            raise value
        return value

    def close(self):
        self.closed = True


class TestWikiquoteProvider(unittest.TestCase):
    def test_success(self) -> None:
        provider = WikiquoteProvider(client=_StubClient(text="<td>Example quote text — Example Author</td>"))
        self.assertEqual(provider.fetch(), Success(Quote("Example quote text", "―Example Author")))

    def test_parse_failure(self) -> None:
        provider = WikiquoteProvider(client=_StubClient(text="<td>No separator here</td>"))
        outcome = provider.fetch()
        self.assertIsInstance(outcome, ParseFailure)
        self.assertEqual(outcome.stage, "split text/source")

    def test_transport_failure(self) -> None:
        provider = WikiquoteProvider(client=_StubClient(error=requests.ConnectionError("dns")))
        outcome = provider.fetch()
        self.assertIsInstance(outcome, TransportFailure)
        self.assertIn("dns", outcome.cause)

    def test_descriptor_and_close(self) -> None:
        client = _StubClient(text="")
        provider = WikiquoteProvider(client=client)
        descriptor = provider.describe()
        self.assertEqual(descriptor.name, "wikiquote")
        self.assertEqual(descriptor.min_refresh_interval, 86400)
        self.assertTrue(descriptor.requires_connectivity)
        provider.close()
        self.assertTrue(client.closed)


_SENTENCE = {
    "status": "success",
    "data": {"content": "海上生明月", "origin": {"title": "望月怀远", "dynasty": "唐代", "author": "张九龄"}},
}


class TestJinrishiciProvider(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.db = DatabaseManager(Path(self._tmpdir.name) / "quotes.db")
        self.area = PreferenceStore(self.db).area("jinrishici")

    def tearDown(self) -> None:
        self.db.close()
        self._tmpdir.cleanup()

    def test_token_requested_once_and_cached(self) -> None:
        client = _StubClient(
            json_by_url={
                JINRISHICI_TOKEN_URL: {"status": "success", "data": "tok-1"},
                JINRISHICI_SENTENCE_URL: _SENTENCE,
            }
        )
        provider = JinrishiciProvider(client=client, token_area=self.area)

        first = provider.fetch()
        second = provider.fetch()

        self.assertIsInstance(first, Success)
        self.assertIsInstance(second, Success)
        self.assertEqual(first.quote.source, "―唐代·张九龄 《望月怀远》")
        token_calls = [url for url, _ in client.calls if url == JINRISHICI_TOKEN_URL]
        self.assertEqual(len(token_calls), 1)
        self.assertEqual(self.area.get(PREF_JINRISHICI_TOKEN), "tok-1")
        self.assertEqual(client.calls[-1][1], {"X-User-Token": "tok-1"})

    def test_configured_token_wins(self) -> None:
        client = _StubClient(json_by_url={JINRISHICI_SENTENCE_URL: _SENTENCE})
        provider = JinrishiciProvider(client=client, token_area=self.area, configured_token="env-token")
        self.assertIsInstance(provider.fetch(), Success)
        self.assertEqual(client.calls, [(JINRISHICI_SENTENCE_URL, {"X-User-Token": "env-token"})])

    def test_status_error_forgets_cached_token(self) -> None:
        self.area.set(PREF_JINRISHICI_TOKEN, "stale")
        client = _StubClient(json_by_url={JINRISHICI_SENTENCE_URL: {"status": "error", "errcode": 4001}})
        provider = JinrishiciProvider(client=client, token_area=self.area)
        outcome = provider.fetch()
        self.assertIsInstance(outcome, ParseFailure)
        self.assertEqual(outcome.stage, "status")
        self.assertIsNone(self.area.get(PREF_JINRISHICI_TOKEN))

    def test_invalid_json_is_parse_failure(self) -> None:
        client = _StubClient(json_by_url={JINRISHICI_SENTENCE_URL: ValueError("bad json")})
        provider = JinrishiciProvider(client=client, configured_token="t")
        outcome = provider.fetch()
        self.assertIsInstance(outcome, ParseFailure)

    def test_transport_failure(self) -> None:
        client = _StubClient(error=requests.Timeout("slow"))
        provider = JinrishiciProvider(client=client, configured_token="t")
        self.assertIsInstance(provider.fetch(), TransportFailure)


class TestFeedProvider(unittest.TestCase):
    def test_success_and_descriptor(self) -> None:
        xml = (
            "<?xml version='1.0'?><rss version='2.0'><channel><title>q</title>"
            "<item><title>Ada Lovelace</title><description>Imagination is the discovering faculty.</description>"
            "</item></channel></rss>"
        )
        provider = FeedProvider(client=_StubClient(text=xml), url="https://example.com/rss", min_refresh_interval=60)
        outcome = provider.fetch()
        self.assertEqual(outcome, Success(Quote("Imagination is the discovering faculty.", "―Ada Lovelace")))
        self.assertEqual(provider.describe().min_refresh_interval, 60)
        self.assertEqual(provider.describe().config_surface, "provider.feed")


class TestQuoteHttpClient(unittest.TestCase):
    def _response(self, status: int, text: str = "ok") -> MagicMock:
        resp = MagicMock()
        resp.status_code = status
        resp.text = text
        resp.content = text.encode("utf-8")
        resp.encoding = "utf-8"
        if status >= 400:
            resp.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
        return resp

    def test_retries_on_retryable_status(self) -> None:
        client = QuoteHttpClient(max_attempts=3)
        client._session.get = MagicMock(side_effect=[self._response(503), self._response(200, "<td>x</td>")])
        with patch.object(QuoteHttpClient, "_sleep_backoff") as sleep:
            body = client.fetch_text("https://example.com")
        self.assertEqual(body, "<td>x</td>")
        self.assertEqual(client._session.get.call_count, 2)
        sleep.assert_called_once_with(1)
        client.close()

    def test_raises_after_last_attempt(self) -> None:
        client = QuoteHttpClient(max_attempts=2)
        client._session.get = MagicMock(side_effect=requests.ConnectionError("down"))
        with patch.object(QuoteHttpClient, "_sleep_backoff"):
            with self.assertRaises(requests.ConnectionError):
                client.fetch_text("https://example.com")
        self.assertEqual(client._session.get.call_count, 2)
        client.close()

    def test_non_retryable_status_raises(self) -> None:
        client = QuoteHttpClient(max_attempts=3)
        client._session.get = MagicMock(return_value=self._response(404))
        with self.assertRaises(requests.HTTPError):
            client.fetch_text("https://example.com")
        self.assertEqual(client._session.get.call_count, 1)
        client.close()


class TestProviderRegistry(unittest.TestCase):
    def test_supported_names(self) -> None:
        self.assertEqual(supported_provider_names(), ("wikiquote", "jinrishici", "feed"))

    def test_unknown_name(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unsupported provider"):
            build_provider("nope", config=MagicMock(), preferences=None)


if __name__ == "__main__":
    unittest.main()
