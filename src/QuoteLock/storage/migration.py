"""Schema migration mechanism for QuoteLock's SQLite database.

Provides versioned, ordered migrations that are applied automatically at
DatabaseManager initialization time. Each migration runs in an explicit
transaction; failures roll back atomically, leaving the database in a safe
state.
"""

from __future__ import annotations

import importlib
import pkgutil
import sqlite3
from dataclasses import dataclass

from QuoteLock.utils.log import log

# UPSERT (INSERT ... ON CONFLICT DO UPDATE) requires SQLite 3.24.
_MIN_SQLITE_VERSION = (3, 24, 0)

_SCHEMA_VERSION_DDL = """
CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id = 1),
    version INTEGER NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    """A single versioned schema migration.

    Attributes:
        version: Monotonically increasing integer, starting at 1.
        description: Human-readable summary of what this migration does.
        sql: One or more semicolon-separated DDL/DML statements to execute.
    """

    version: int
    description: str
    sql: str


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations to the database.

    Args:
        conn: Active SQLite connection in autocommit mode.

    Raises:
        RuntimeError: If the SQLite library is too old.
        ValueError: If the migration list contains a version gap or does not start at 1.
        sqlite3.Error: If a migration statement fails (transaction is rolled back).
    """
    _check_sqlite_version()
    migrations = _load_migrations()
    _validate_migration_list(migrations)
    conn.execute(_SCHEMA_VERSION_DDL)

    current_ver = _get_current_version(conn)
    pending = [m for m in migrations if m.version > current_ver]

    if not pending:
        log.debug("schema already at version %d, no migrations to run", current_ver)
        return

    for migration in pending:
        _apply_migration(conn, migration)
        log.debug("applied migration v%d: %s", migration.version, migration.description)


def _load_migrations() -> list[Migration]:
    """Discover ``MIGRATION`` constants in ``QuoteLock.storage.migrations``, sorted by version."""
    from QuoteLock.storage import migrations as package

    found: list[Migration] = []
    for info in pkgutil.iter_modules(package.__path__):
        module = importlib.import_module(f"{package.__name__}.{info.name}")
        migration = getattr(module, "MIGRATION", None)
        if isinstance(migration, Migration):
            found.append(migration)
    return sorted(found, key=lambda m: m.version)


def _check_sqlite_version() -> None:
    raw = sqlite3.sqlite_version
    parts = tuple(int(x) for x in raw.split("."))
    if parts < _MIN_SQLITE_VERSION:
        required = ".".join(str(x) for x in _MIN_SQLITE_VERSION)
        raise RuntimeError(
            f"SQLite >= {required} is required (found {raw}). "
            "Please upgrade your SQLite library."
        )


def _validate_migration_list(migrations: list[Migration]) -> None:
    """Raise ValueError if migration version numbers are not consecutive from 1."""
    for expected, m in enumerate(migrations, start=1):
        if m.version != expected:
            raise ValueError(
                f"Migration version gap: expected version {expected}, "
                f"got {m.version} (description: {m.description!r})."
            )


def _get_current_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT version FROM schema_version WHERE id = 1").fetchone()
    return row[0] if row else 0


def _apply_migration(conn: sqlite3.Connection, migration: Migration) -> None:
    """Execute a single migration inside an explicit transaction.

    Statements are executed one by one with ``conn.execute()`` (never
    ``executescript()``, which would issue an implicit COMMIT and break
    atomicity).

    Raises:
        sqlite3.Error: If any statement fails; the transaction is rolled back.
    """
    conn.execute("BEGIN")
    try:
        statements = [s.strip() for s in migration.sql.split(";") if s.strip()]
        for stmt in statements:
            conn.execute(stmt)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (id, version) VALUES (1, ?)",
            (migration.version,),
        )
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
