"""Collected quote storage implementation."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from QuoteLock.core.models import CollectionEntry, CollectionResult
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.storage.db import DatabaseManager


class QuoteCollectionStore:
    """SQLite-based table of quotes the user collected.

    The fingerprint column is unique, so collecting the same quote twice
    yields one row. Store failures are reported as rejected results instead
    of exceptions.
    """

    def __init__(self, db_manager: DatabaseManager):
        log.debug("Initializing QuoteCollectionStore")
        self._db = db_manager

    def insert(self, entry: CollectionEntry) -> CollectionResult:
        """Insert a collected quote.

        Args:
            entry: Entry to save.

        Returns:
            Accepted result carrying the row id (the existing id when the
            fingerprint is already stored), or a rejected result.
        """
        if not entry.text.strip():
            return CollectionResult.rejected("quote text is empty")
        if not entry.fingerprint:
            return CollectionResult.rejected("fingerprint is empty")
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO quote_collections (text, source, fingerprint)
                    VALUES (?, ?, ?)
                    ON CONFLICT(fingerprint) DO NOTHING
                    """,
                    (entry.text, entry.source, entry.fingerprint),
                )
                row = conn.execute(
                    "SELECT id FROM quote_collections WHERE fingerprint = ?",
                    (entry.fingerprint,),
                ).fetchone()
        except sqlite3.Error as e:
            log.warning("Collect failed: fingerprint=%s error=%s", entry.fingerprint, e)
            return CollectionResult.rejected(str(e))
        log.debug("Collected quote: id=%s fingerprint=%s", row[0], entry.fingerprint)
        return CollectionResult.accepted(int(row[0]))

    def delete(self, fingerprint: str) -> CollectionResult:
        """Delete a collected quote by fingerprint.

        Returns:
            Accepted result carrying the number of deleted rows (0 when the
            quote was not collected), or a rejected result.
        """
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    "DELETE FROM quote_collections WHERE fingerprint = ?",
                    (fingerprint,),
                )
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            log.warning("Uncollect failed: fingerprint=%s error=%s", fingerprint, e)
            return CollectionResult.rejected(str(e))
        log.debug("Uncollected quote: fingerprint=%s rows=%d", fingerprint, deleted)
        return CollectionResult.accepted(deleted)

    def contains(self, fingerprint: str) -> bool:
        with self._db.lock:
            row = self._db.get_connection().execute(
                "SELECT 1 FROM quote_collections WHERE fingerprint = ?",
                (fingerprint,),
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._db.lock:
            row = self._db.get_connection().execute("SELECT COUNT(*) FROM quote_collections").fetchone()
        return int(row[0])

    def list_entries(self) -> list[tuple[CollectionEntry, datetime]]:
        """Return all collected quotes, newest first, with their collection time."""
        with self._db.lock:
            rows = self._db.get_connection().execute(
                """
                SELECT text, source, fingerprint, collected_at
                FROM quote_collections
                ORDER BY collected_at DESC, id DESC
                """
            ).fetchall()
        return [
            (
                CollectionEntry(text=text, source=source, fingerprint=fingerprint),
                datetime.fromtimestamp(collected_at, tz=timezone.utc),
            )
            for text, source, fingerprint, collected_at in rows
        ]
