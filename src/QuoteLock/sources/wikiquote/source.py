"""Wikiquote quote provider.

Composes the HTTP client and the page parser into a `QuoteProvider`.
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from QuoteLock.core.errors import QuoteParseError
from QuoteLock.core.models import (
    FetchOutcome,
    ParseFailure,
    ProviderDescriptor,
    Success,
    TransportFailure,
)
from QuoteLock.sources.http import QuoteHttpClient
from QuoteLock.sources.wikiquote.parser import parse_wikiquote_page
from QuoteLock.utils.log import log

WIKIQUOTE_URL = "https://zh.m.wikiquote.org/zh-cn/Wikiquote:%E9%A6%96%E9%A1%B5"


@dataclass(slots=True)
class WikiquoteProvider:
    """`QuoteProvider` scraping the featured quote of the Wikiquote main page.

    The page changes once a day, hence the daily minimum refresh interval.
    """

    client: QuoteHttpClient
    url: str = WIKIQUOTE_URL
    name: str = "wikiquote"

    def describe(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            display_name="Wikiquote",
            min_refresh_interval=86400,
            requires_connectivity=True,
        )

    def fetch(self) -> FetchOutcome:
        """Download the page and parse the featured quote."""
        try:
            page = self.client.fetch_text(self.url)
        except requests.RequestException as e:
            log.warning("Wikiquote download failed: %s", e)
            return TransportFailure(cause=str(e))

        try:
            quote = parse_wikiquote_page(page)
        except QuoteParseError as e:
            log.warning("Wikiquote parse failed: stage=%s detail=%s", e.stage, e.detail)
            return ParseFailure(stage=e.stage, detail=e.detail)

        log.debug("Wikiquote quote parsed: %s %s", quote.text, quote.source)
        return Success(quote)

    def close(self) -> None:
        self.client.close()
