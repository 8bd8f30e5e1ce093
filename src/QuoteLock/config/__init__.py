from __future__ import annotations

"""Public configuration API for QuoteLock."""

from QuoteLock.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from QuoteLock.config.display import DisplayConfig
from QuoteLock.config.provider import ProviderConfig
from QuoteLock.config.refresh import RefreshConfig
from QuoteLock.config.runtime import RuntimeConfig
from QuoteLock.config.storage import StorageConfig

__all__ = [
    "RuntimeConfig",
    "ProviderConfig",
    "StorageConfig",
    "DisplayConfig",
    "RefreshConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]
