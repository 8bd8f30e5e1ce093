from __future__ import annotations

"""Shared helpers for configuration loading and validation."""

from typing import Any, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from root config.

    Args:
        raw: Root configuration mapping.
        key: Section name.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value from a section.

    Raises:
        ValueError: If field is missing.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def get_optional_value(section: Mapping[str, Any], field: str, default: Any) -> Any:
    """Return optional field value with default."""
    return section.get(field, default)


def expect_str(value: Any, config_key: str) -> str:
    """Validate and return string value."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_optional_str(value: Any, config_key: str) -> str | None:
    """Validate a string value that may be null; blank strings become None."""
    if value is None:
        return None
    return expect_str(value, config_key).strip() or None


def expect_bool(value: Any, config_key: str) -> bool:
    """Validate and return boolean value."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_float(value: Any, config_key: str) -> float:
    """Validate and return float value from numeric input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return float(value)


def check_positive(value: float, config_key: str) -> None:
    """Reject zero or negative durations, sizes and intervals."""
    if value <= 0:
        raise ValueError(f"{config_key} must be positive")


def check_http_url(value: str | None, config_key: str, *, required: bool = False) -> None:
    """Validate an http(s) URL used for quote fetching or connectivity probes.

    Args:
        value: URL to check; None or blank is allowed unless ``required``.
        config_key: Dotted key used in error messages.
        required: Whether a missing URL is an error.

    Raises:
        ValueError: If the URL is missing while required or is not http(s).
    """
    if not value or not value.strip():
        if required:
            raise ValueError(f"Missing required config: {config_key}")
        return
    if not value.strip().startswith(("http://", "https://")):
        raise ValueError(f"{config_key} must be an http(s) URL, got: {value}")
