from __future__ import annotations

"""Storage domain configuration for the preference and collection database."""

import os
from dataclasses import dataclass
from typing import Any, Mapping

from QuoteLock.config.common import (
    check_positive,
    expect_float,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)

DEFAULT_BUSY_TIMEOUT = 5.0


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Storage configuration.

    Attributes:
        db_path: SQLite file shared by preferences and collections; ``~`` is
            expanded so a watcher and one-shot commands can point at the same
            file from different working directories.
        busy_timeout: Seconds a write waits for another process's lock.
    """

    db_path: str
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT


def load_storage(raw: Mapping[str, Any]) -> StorageConfig:
    """Load storage domain config from raw mapping."""
    section = get_section(raw, "storage", required=True)
    db_path = expect_str(get_required_value(section, "db_path", "storage.db_path"), "storage.db_path")
    return StorageConfig(
        db_path=os.path.expanduser(db_path.strip()),
        busy_timeout=expect_float(
            get_optional_value(section, "busy_timeout", DEFAULT_BUSY_TIMEOUT),
            "storage.busy_timeout",
        ),
    )


def check_storage(config: StorageConfig) -> None:
    """Validate storage domain constraints."""
    if not config.db_path:
        raise ValueError("storage.db_path must not be empty")
    if config.db_path.endswith(("/", os.sep)) or os.path.isdir(config.db_path):
        raise ValueError(f"storage.db_path must name a file, got directory: {config.db_path}")
    check_positive(config.busy_timeout, "storage.busy_timeout")
