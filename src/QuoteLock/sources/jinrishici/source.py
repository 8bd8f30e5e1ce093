"""Jinrishici (classical Chinese poetry) quote provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

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
from QuoteLock.sources.jinrishici.parser import (
    STAGE_STATUS,
    parse_sentence_payload,
    parse_token_payload,
)
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.storage.preferences import PreferenceArea

JINRISHICI_TOKEN_URL = "https://v2.jinrishici.com/token"
JINRISHICI_SENTENCE_URL = "https://v2.jinrishici.com/sentence"
JINRISHICI_NAMESPACE = "jinrishici"
PREF_JINRISHICI_TOKEN = "token"


@dataclass(slots=True)
class JinrishiciProvider:
    """`QuoteProvider` backed by the Jinrishici sentence API.

    The API requires a user token. A configured token wins; otherwise a token
    is requested once and cached in the provider's own preference area.
    """

    client: QuoteHttpClient
    token_area: PreferenceArea | None = None
    configured_token: str = ""
    name: str = "jinrishici"

    def describe(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            display_name="Jinrishici",
            min_refresh_interval=0,
            requires_connectivity=True,
        )

    def fetch(self) -> FetchOutcome:
        """Resolve a token, then download and parse one sentence."""
        try:
            token = self._resolve_token()
            payload = self.client.fetch_json(
                JINRISHICI_SENTENCE_URL,
                headers={"X-User-Token": token},
            )
            quote = parse_sentence_payload(payload)
        except requests.RequestException as e:
            log.warning("Jinrishici download failed: %s", e)
            return TransportFailure(cause=str(e))
        except QuoteParseError as e:
            log.warning("Jinrishici parse failed: stage=%s detail=%s", e.stage, e.detail)
            if e.stage == STAGE_STATUS:
                self._forget_cached_token()
            return ParseFailure(stage=e.stage, detail=e.detail)
        except ValueError as e:
            log.warning("Jinrishici returned invalid JSON: %s", e)
            return ParseFailure(stage=STAGE_STATUS, detail="invalid JSON")

        return Success(quote)

    def close(self) -> None:
        self.client.close()

    def _resolve_token(self) -> str:
        if self.configured_token:
            return self.configured_token
        if self.token_area is not None:
            cached = self.token_area.get_str(PREF_JINRISHICI_TOKEN)
            if cached:
                return cached

        token = parse_token_payload(self.client.fetch_json(JINRISHICI_TOKEN_URL))
        log.info("Obtained a new Jinrishici token")
        if self.token_area is not None:
            self.token_area.set(PREF_JINRISHICI_TOKEN, token)
        return token

    def _forget_cached_token(self) -> None:
        if self.token_area is not None and not self.configured_token:
            self.token_area.remove(PREF_JINRISHICI_TOKEN)
