"""HTTP client shared by quote providers.

Downloads pages and JSON payloads with retry/backoff. Parsing and mapping to
quotes are handled by each provider.
"""

from __future__ import annotations

import random
import time
from typing import Any, Mapping, Optional

import requests

from QuoteLock.utils.log import log

DEFAULT_TIMEOUT = 15.0
MAX_ATTEMPTS = 3
BASE_PAUSE = 1.0
MAX_SLEEP = 10.0

RETRYABLE_STATUS = {429, 500, 502, 503, 504}

HEADERS = {
    "User-Agent": "QuoteLock/0.1 (+https://github.com/Yubyf/QuoteLockX)",
    "Accept": "text/html,application/json,application/xml;q=0.9,*/*;q=0.8",
}


class QuoteHttpClient:
    """Low-level HTTP client for quote sources.

    Responsible only for making network requests and returning raw bodies.
    Errors propagate as ``requests`` exceptions; non-2xx responses raise
    ``requests.HTTPError``.
    """

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT, max_attempts: int = MAX_ATTEMPTS) -> None:
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._session = requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections."""
        self._session.close()

    def __enter__(self) -> QuoteHttpClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def fetch_text(self, url: str, *, headers: Optional[Mapping[str, str]] = None) -> str:
        """Download ``url`` and return the decoded body."""
        resp = self._get_with_retry(url, headers=headers)
        resp.raise_for_status()
        if resp.encoding is None or resp.encoding.lower() == "iso-8859-1":
            # Servers often omit the charset for UTF-8 pages.
            resp.encoding = resp.apparent_encoding or "utf-8"
        log.debug("HTTP ok: url=%s status=%s bytes=%s", url, resp.status_code, len(resp.content))
        return resp.text

    def fetch_json(self, url: str, *, headers: Optional[Mapping[str, str]] = None) -> Any:
        """Download ``url`` and decode it as JSON.

        Raises:
            requests.RequestException: On transport errors or non-2xx status.
            ValueError: If the body is not valid JSON.
        """
        resp = self._get_with_retry(url, headers=headers)
        resp.raise_for_status()
        log.debug("HTTP ok: url=%s status=%s bytes=%s", url, resp.status_code, len(resp.content))
        try:
            return resp.json()
        except requests.exceptions.JSONDecodeError as e:
            # requests' decode error is also a RequestException; surface it as a payload problem.
            raise ValueError(f"Invalid JSON from {url}: {e}") from e

    def _get_with_retry(self, url: str, *, headers: Optional[Mapping[str, str]]) -> requests.Response:
        """Issue GET request with retry/backoff.

        Retries on timeouts/connection errors and selected HTTP status codes.

        Raises:
            requests.RequestException: Last observed error when all attempts failed.
        """
        merged = dict(HEADERS)
        if headers:
            merged.update(headers)

        last_err: requests.RequestException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                log.debug("HTTP attempt %d/%d to %s", attempt, self.max_attempts, url)
                resp = self._session.get(url, headers=merged, timeout=self.timeout)
                if resp.status_code in RETRYABLE_STATUS:
                    raise requests.exceptions.HTTPError(f"HTTP {resp.status_code}", response=resp)
                return resp
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                last_err = e
            except requests.exceptions.HTTPError as e:
                last_err = e

            if attempt < self.max_attempts:
                log.debug("HTTP retrying after attempt %d (error=%s)", attempt, last_err)
                self._sleep_backoff(attempt)

        assert last_err is not None
        raise last_err

    @staticmethod
    def _sleep_backoff(attempt: int) -> None:
        delay = min(BASE_PAUSE * (2 ** (attempt - 1)) + random.uniform(0, 0.5), MAX_SLEEP)
        time.sleep(delay)
