"""Factory functions for CLI component creation.

Centralizes component instantiation to reduce coupling between CLI and
implementations. Enables easy substitution for testing and extensions.
"""

from __future__ import annotations

from dataclasses import dataclass

from QuoteLock.actions import ActionDispatcher, LocalCollectionChannel, LocalRefreshChannel
from QuoteLock.config import AppConfig
from QuoteLock.context import DisplayContext, create_display_context
from QuoteLock.display import DisplayReconciler, RenderSurface
from QuoteLock.services import QuoteProvider, RefreshOrchestrator, create_refresh_orchestrator
from QuoteLock.sources.registry import build_provider
from QuoteLock.storage import DatabaseManager, PreferenceStore, QuoteCollectionStore, create_storage
from QuoteLock.utils.log import log


@dataclass(slots=True)
class AppComponents:
    """Wired application components sharing one database."""

    config: AppConfig
    db_manager: DatabaseManager
    preferences: PreferenceStore
    collections: QuoteCollectionStore
    provider: QuoteProvider
    orchestrator: RefreshOrchestrator
    context: DisplayContext
    reconciler: DisplayReconciler
    refresh_channel: LocalRefreshChannel
    dispatcher: ActionDispatcher

    def close(self) -> None:
        """Stop workers and release network and database resources."""
        self.reconciler.stop()
        self.refresh_channel.close(wait=True)
        self.provider.close()
        self.db_manager.close()


class ComponentFactory:
    """Factory for creating the full component graph."""

    @staticmethod
    def create_provider(config: AppConfig, preferences: PreferenceStore) -> QuoteProvider:
        """Build the configured quote provider.

        Args:
            config: Application configuration.
            preferences: Preference store for provider-private state.

        Returns:
            Provider named by ``provider.name``.
        """
        return build_provider(config.provider.name, config=config, preferences=preferences)

    @staticmethod
    def create_components(
        config: AppConfig,
        *,
        surface: RenderSurface | None = None,
    ) -> AppComponents:
        """Create storage, services, display and actions.

        Args:
            config: Application configuration.
            surface: Rendering surface; a console surface when omitted.

        Returns:
            AppComponents; call ``close()`` when done.
        """
        db_manager, preferences, collections = create_storage(config)
        try:
            provider = ComponentFactory.create_provider(config, preferences)
            orchestrator = create_refresh_orchestrator(
                config,
                preferences,
                collections=collections,
                provider=provider,
            )
            context = create_display_context(config, preferences, surface=surface)
        except Exception:
            db_manager.close()
            raise

        refresh_channel = LocalRefreshChannel(orchestrator)
        dispatcher = ActionDispatcher(
            context,
            refresh_channel=refresh_channel,
            collection_channel=LocalCollectionChannel(collections, context.quote_area),
        )
        log.debug("Components created: provider=%s db=%s", provider.name, config.storage.db_path)
        return AppComponents(
            config=config,
            db_manager=db_manager,
            preferences=preferences,
            collections=collections,
            provider=provider,
            orchestrator=orchestrator,
            context=context,
            reconciler=DisplayReconciler(context),
            refresh_channel=refresh_channel,
            dispatcher=dispatcher,
        )
