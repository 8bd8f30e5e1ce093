"""SQLite database utilities."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from QuoteLock.storage.migration import run_migrations


class DatabaseManager:
    """Shared database connection manager.

    One connection per database file is shared by the preference store, the
    collection store and background refresh threads. Every access goes through
    ``lock`` so statements from different threads never interleave inside a
    transaction.

    Supports context manager protocol for automatic connection cleanup.
    """

    def __init__(self, db_path: Path, *, busy_timeout: float = 5.0) -> None:
        """Open the database and apply pending migrations.

        Args:
            db_path: Absolute path or project-relative path to database file.
            busy_timeout: Seconds to wait for a lock held by another process.
        """
        self.db_path = db_path
        self.lock = threading.RLock()
        self.conn = ensure_db(db_path, busy_timeout=busy_timeout)
        with self.lock:
            run_migrations(self.conn)

    def get_connection(self) -> sqlite3.Connection:
        """Get the shared database connection."""
        return self.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements in one explicit transaction.

        Commits on success and rolls back on any exception.
        """
        with self.lock:
            self.conn.execute("BEGIN IMMEDIATE")
            try:
                yield self.conn
            except BaseException:
                self.conn.execute("ROLLBACK")
                raise
            self.conn.execute("COMMIT")

    def data_version(self) -> int:
        """Return SQLite's ``data_version``; it changes when another connection commits."""
        with self.lock:
            return int(self.conn.execute("PRAGMA data_version").fetchone()[0])

    def close(self) -> None:
        """Close the database connection."""
        with self.lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

    def __enter__(self) -> DatabaseManager:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path, *, busy_timeout: float = 5.0) -> sqlite3.Connection:
    """Ensure database file exists and return connection.

    The connection runs in autocommit mode (``isolation_level=None``) so that
    transactions are always explicit, and may be used from any thread.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(db_path), timeout=busy_timeout, isolation_level=None, check_same_thread=False)
