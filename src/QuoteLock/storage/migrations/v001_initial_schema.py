"""Migration v001: initial schema (preferences, quote_collections)."""

from __future__ import annotations

from QuoteLock.storage.migration import Migration

MIGRATION = Migration(
    version=1,
    description="Initial schema: preferences, quote_collections",
    sql="""
        CREATE TABLE IF NOT EXISTS preferences (
          namespace TEXT NOT NULL,
          key TEXT NOT NULL,
          value TEXT NOT NULL,
          updated_at INTEGER NOT NULL DEFAULT (CAST(strftime('%s','now') AS INTEGER)),
          PRIMARY KEY (namespace, key)
        );

        CREATE TABLE IF NOT EXISTS quote_collections (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          text TEXT NOT NULL,
          source TEXT NOT NULL DEFAULT '',
          fingerprint TEXT NOT NULL UNIQUE,
          collected_at INTEGER NOT NULL DEFAULT (CAST(strftime('%s','now') AS INTEGER))
        );

        CREATE INDEX IF NOT EXISTS idx_collections_collected
          ON quote_collections(collected_at DESC)
    """,
)
