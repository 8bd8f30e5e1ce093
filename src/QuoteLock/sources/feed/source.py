"""RSS/Atom quote-of-the-day provider."""

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
from QuoteLock.sources.feed.parser import parse_quote_feed
from QuoteLock.sources.http import QuoteHttpClient
from QuoteLock.utils.log import log


@dataclass(slots=True)
class FeedProvider:
    """`QuoteProvider` reading the newest entry of a quote feed."""

    client: QuoteHttpClient
    url: str
    min_refresh_interval: int = 86400
    name: str = "feed"

    def describe(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            display_name="Quote feed",
            min_refresh_interval=self.min_refresh_interval,
            requires_connectivity=True,
            config_surface="provider.feed",
        )

    def fetch(self) -> FetchOutcome:
        try:
            xml_text = self.client.fetch_text(self.url)
        except requests.RequestException as e:
            log.warning("Feed download failed: url=%s error=%s", self.url, e)
            return TransportFailure(cause=str(e))

        try:
            quote = parse_quote_feed(xml_text)
        except QuoteParseError as e:
            log.warning("Feed parse failed: stage=%s detail=%s", e.stage, e.detail)
            return ParseFailure(stage=e.stage, detail=e.detail)
        return Success(quote)

    def close(self) -> None:
        self.client.close()
