"""Display domain configuration: placeholder prompt, rail offsets and fonts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QuoteLock.config.common import (
    check_positive,
    expect_float,
    expect_int,
    expect_optional_str,
    expect_str,
    get_optional_value,
    get_section,
)

# Rail offsets in dp: margin + refresh icon + margin (+ collect icon + margin) + 1.
DEFAULT_NARROW_OFFSET = -(16.0 + 32.0 + 16.0 + 1.0)
DEFAULT_WIDE_OFFSET = -(16.0 + 32.0 + 16.0 + 32.0 + 16.0 + 1.0)


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """Store raw display settings; resolved into typed resources at startup."""

    placeholder_text: str = "Open the QuoteLock app"
    placeholder_source: str = "to download your first quote"
    narrow_offset: float = DEFAULT_NARROW_OFFSET
    wide_offset: float = DEFAULT_WIDE_OFFSET
    default_text_size: int = 16
    default_source_size: int = 14
    fonts_dir: str | None = None


def load_display(raw: Mapping[str, Any]) -> DisplayConfig:
    """Load the optional ``display`` section.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "display", required=False)
    defaults = DisplayConfig()
    return DisplayConfig(
        placeholder_text=expect_str(
            get_optional_value(section, "placeholder_text", defaults.placeholder_text),
            "display.placeholder_text",
        ),
        placeholder_source=expect_str(
            get_optional_value(section, "placeholder_source", defaults.placeholder_source),
            "display.placeholder_source",
        ),
        narrow_offset=expect_float(
            get_optional_value(section, "narrow_offset", defaults.narrow_offset),
            "display.narrow_offset",
        ),
        wide_offset=expect_float(
            get_optional_value(section, "wide_offset", defaults.wide_offset),
            "display.wide_offset",
        ),
        default_text_size=expect_int(
            get_optional_value(section, "default_text_size", defaults.default_text_size),
            "display.default_text_size",
        ),
        default_source_size=expect_int(
            get_optional_value(section, "default_source_size", defaults.default_source_size),
            "display.default_source_size",
        ),
        fonts_dir=expect_optional_str(get_optional_value(section, "fonts_dir", None), "display.fonts_dir"),
    )


def check_display(config: DisplayConfig) -> None:
    """Validate display domain constraints.

    Raises:
        ValueError: If values violate display constraints.
    """
    if not config.placeholder_text.strip():
        raise ValueError("display.placeholder_text must not be empty")
    check_positive(config.default_text_size, "display.default_text_size")
    check_positive(config.default_source_size, "display.default_source_size")
