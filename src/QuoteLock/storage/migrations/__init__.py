"""Versioned migration files for QuoteLock's SQLite schema.

Each module in this package must expose a single ``MIGRATION`` constant of
type :class:`~QuoteLock.storage.migration.Migration`. Modules are discovered
and sorted automatically; file names follow the ``vNNN_<description>.py``
convention for readability.
"""
