from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from QuoteLock.config.display import DisplayConfig, check_display, load_display
from QuoteLock.config.provider import ProviderConfig, check_provider, load_provider
from QuoteLock.config.refresh import RefreshConfig, check_refresh, load_refresh
from QuoteLock.config.runtime import RuntimeConfig, check_runtime, load_runtime
from QuoteLock.config.storage import StorageConfig, check_storage, load_storage

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    provider: ProviderConfig
    storage: StorageConfig
    display: DisplayConfig
    refresh: RefreshConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    provider = load_provider(raw)
    storage = load_storage(raw)
    display = load_display(raw)
    refresh = load_refresh(raw)

    check_runtime(runtime)
    check_provider(provider)
    check_storage(storage)
    check_display(display)
    check_refresh(refresh)

    return AppConfig(
        runtime=runtime,
        provider=provider,
        storage=storage,
        display=display,
        refresh=refresh,
    )


def load_config(path: Path) -> AppConfig:
    """Load a config file layered over the default config when it exists."""
    if path != DEFAULT_CONFIG_PATH and DEFAULT_CONFIG_PATH.is_file():
        return load_config_with_defaults(path, default_path=DEFAULT_CONFIG_PATH)
    return load_config_with_defaults(path, default_path=path)


def load_config_with_defaults(
    config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH
) -> AppConfig:
    """Load config by merging defaults and optional override."""
    base = parse_yaml(default_path.read_text(encoding="utf-8"))
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    merged = merge_config_dicts(base, override)
    return parse_config_dict(merged)


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
