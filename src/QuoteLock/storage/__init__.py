"""Storage layer for QuoteLock.

Provides database management, the namespaced preference store and the
collected quote table.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from QuoteLock.storage.db import DatabaseManager
from QuoteLock.storage.migration import run_migrations
from QuoteLock.storage.preferences import ChangeEvent, ChangeStream, PreferenceArea, PreferenceStore
from QuoteLock.storage.quote_collections import QuoteCollectionStore
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.config import AppConfig


def create_storage(
    config: AppConfig,
) -> tuple[DatabaseManager, PreferenceStore, QuoteCollectionStore]:
    """Open the database and create the stores backed by it.

    Args:
        config: Application configuration containing storage settings.

    Returns:
        Tuple of (db_manager, preference_store, collection_store).
    """
    db_path = Path(config.storage.db_path)
    db_manager = DatabaseManager(db_path, busy_timeout=config.storage.busy_timeout)
    log.debug("Storage opened: %s (busy_timeout=%.1fs)", db_path, config.storage.busy_timeout)
    return db_manager, PreferenceStore(db_manager), QuoteCollectionStore(db_manager)


__all__ = [
    "ChangeEvent",
    "ChangeStream",
    "DatabaseManager",
    "PreferenceArea",
    "PreferenceStore",
    "QuoteCollectionStore",
    "create_storage",
    "run_migrations",
]
