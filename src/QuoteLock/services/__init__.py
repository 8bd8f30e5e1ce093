"""Refresh service layer for QuoteLock.

Provides the provider protocol, the refresh orchestrator and factory
functions for component creation.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from QuoteLock.services.collection import collected_values
from QuoteLock.services.connectivity import ConnectivityProbe
from QuoteLock.services.refresh import QuoteProvider, RefreshOrchestrator
from QuoteLock.services.scheduler import RefreshScheduler
from QuoteLock.storage.preferences import QUOTES_NAMESPACE

if TYPE_CHECKING:
    from QuoteLock.config import AppConfig
    from QuoteLock.storage.preferences import PreferenceStore
    from QuoteLock.storage.quote_collections import QuoteCollectionStore


def create_refresh_orchestrator(
    config: AppConfig,
    preferences: PreferenceStore,
    collections: QuoteCollectionStore | None = None,
    provider: QuoteProvider | None = None,
) -> RefreshOrchestrator:
    """Create a refresh orchestrator for the configured provider.

    Args:
        config: Application configuration containing provider settings.
        preferences: Preference store holding the quote area.
        collections: Optional collection store; when given, the ``collected``
            flag is derived for every new quote and written with it.
        provider: Provider override; built from ``config.provider.name`` when omitted.

    Returns:
        Configured RefreshOrchestrator instance.
    """
    if provider is None:
        from QuoteLock.sources.registry import build_provider

        provider = build_provider(config.provider.name, config=config, preferences=preferences)

    extra_values = partial(collected_values, collections) if collections is not None else None
    return RefreshOrchestrator(
        provider=provider,
        quote_area=preferences.area(QUOTES_NAMESPACE),
        connectivity=ConnectivityProbe(config.refresh.check_url, config.refresh.check_timeout),
        extra_values=extra_values,
    )


__all__ = [
    "ConnectivityProbe",
    "QuoteProvider",
    "RefreshOrchestrator",
    "RefreshScheduler",
    "create_refresh_orchestrator",
    "collected_values",
]
