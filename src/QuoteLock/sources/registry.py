"""Provider registry and builders for quote providers."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from QuoteLock.config import AppConfig
    from QuoteLock.services.refresh import QuoteProvider
    from QuoteLock.storage.preferences import PreferenceStore

ProviderBuilder = Callable[["AppConfig", "PreferenceStore | None"], "QuoteProvider"]


def build_provider(
    provider_name: str,
    *,
    config: AppConfig,
    preferences: PreferenceStore | None,
) -> QuoteProvider:
    """Build a quote provider from its registered name.

    Args:
        provider_name: Provider identifier from ``provider.name``.
        config: Parsed application configuration.
        preferences: Preference store for providers that cache state (tokens).

    Returns:
        QuoteProvider: Initialized provider implementation for the given name.

    Raises:
        ValueError: If ``provider_name`` is not registered.
    """
    builder = _provider_builders().get(provider_name)
    if builder is None:
        raise ValueError(f"Unsupported provider in config.provider.name: {provider_name}")
    return builder(config, preferences)


def supported_provider_names() -> tuple[str, ...]:
    """Return all provider names that can be built by the registry, in registry order."""
    return tuple(_provider_builders().keys())


def _provider_builders() -> dict[str, ProviderBuilder]:
    return {
        "wikiquote": _build_wikiquote_provider,
        "jinrishici": _build_jinrishici_provider,
        "feed": _build_feed_provider,
    }


def _build_wikiquote_provider(config: AppConfig, preferences: PreferenceStore | None) -> QuoteProvider:
    del preferences
    from QuoteLock.sources.http import QuoteHttpClient
    from QuoteLock.sources.wikiquote.source import WikiquoteProvider

    return WikiquoteProvider(client=QuoteHttpClient(timeout=config.provider.timeout))


def _build_jinrishici_provider(config: AppConfig, preferences: PreferenceStore | None) -> QuoteProvider:
    from QuoteLock.sources.http import QuoteHttpClient
    from QuoteLock.sources.jinrishici.source import JINRISHICI_NAMESPACE, JinrishiciProvider

    return JinrishiciProvider(
        client=QuoteHttpClient(timeout=config.provider.timeout),
        token_area=preferences.area(JINRISHICI_NAMESPACE) if preferences is not None else None,
        configured_token=config.provider.jinrishici_token,
    )


def _build_feed_provider(config: AppConfig, preferences: PreferenceStore | None) -> QuoteProvider:
    del preferences
    from QuoteLock.sources.feed.source import FeedProvider
    from QuoteLock.sources.http import QuoteHttpClient

    return FeedProvider(
        client=QuoteHttpClient(timeout=config.provider.timeout),
        url=config.provider.feed_url,
        min_refresh_interval=config.provider.feed_min_refresh_interval,
    )
