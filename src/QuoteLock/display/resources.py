"""Typed display resources resolved once at startup."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from QuoteLock.core.errors import ConfigurationError
from QuoteLock.storage.preferences import PREF_COMMON_FONT_FAMILY_DEFAULT
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.config import DisplayConfig

FONT_SUFFIXES = (".ttf", ".otf", ".ttc")


@dataclass(frozen=True, slots=True)
class DisplayResources:
    """Resolved placeholder prompt, rail offsets and font defaults.

    Attributes:
        placeholder_text: Prompt shown on the text line before any quote exists.
        placeholder_source: Prompt shown on the source line before any quote exists.
        narrow_offset: Rail offset with only the refresh action visible.
        wide_offset: Rail offset with refresh and collect actions visible.
        default_text_size: Quote font size when the stored one is unusable.
        default_source_size: Source font size when the stored one is unusable.
        fonts_dir: Directory searched for custom font families, or None.
    """

    placeholder_text: str
    placeholder_source: str
    narrow_offset: float
    wide_offset: float
    default_text_size: int
    default_source_size: int
    fonts_dir: Path | None = None


def resolve_display_resources(config: DisplayConfig) -> DisplayResources:
    """Build display resources from the display config section.

    Args:
        config: Parsed display configuration.

    Returns:
        DisplayResources ready for the reconciler.

    Raises:
        ConfigurationError: If any value cannot be used for rendering.
    """
    if not isinstance(config.placeholder_text, str) or not config.placeholder_text.strip():
        raise ConfigurationError("display.placeholder_text must be a non-empty string")
    if not isinstance(config.placeholder_source, str):
        raise ConfigurationError("display.placeholder_source must be a string")
    for key, value in (("narrow_offset", config.narrow_offset), ("wide_offset", config.wide_offset)):
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
            raise ConfigurationError(f"display.{key} must be a finite number, got {value!r}")
    for key, value in (
        ("default_text_size", config.default_text_size),
        ("default_source_size", config.default_source_size),
    ):
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ConfigurationError(f"display.{key} must be a positive integer, got {value!r}")

    fonts_dir: Path | None = None
    if config.fonts_dir:
        fonts_dir = Path(config.fonts_dir)
        if not fonts_dir.is_dir():
            raise ConfigurationError(f"display.fonts_dir is not a directory: {fonts_dir}")

    return DisplayResources(
        placeholder_text=config.placeholder_text,
        placeholder_source=config.placeholder_source,
        narrow_offset=float(config.narrow_offset),
        wide_offset=float(config.wide_offset),
        default_text_size=config.default_text_size,
        default_source_size=config.default_source_size,
        fonts_dir=fonts_dir,
    )


class FontResolver:
    """Look up font family files under a fonts directory.

    ``"default"`` (or an empty family) means the built-in font. A family
    without a matching file also falls back to the built-in font, with a
    warning. Successful lookups are cached.
    """

    def __init__(self, fonts_dir: Path | None) -> None:
        self.fonts_dir = fonts_dir
        self._cache: dict[str, str] = {}
        self._lock = threading.Lock()

    def resolve(self, family: str | None) -> str | None:
        """Return the font file path for ``family``, or None for the built-in font."""
        if not family or family == PREF_COMMON_FONT_FAMILY_DEFAULT:
            return None
        with self._lock:
            cached = self._cache.get(family)
        if cached is not None:
            return cached

        path = self._find(family)
        if path is None:
            log.warning("Font asset not found, using built-in font: family=%s", family)
            return None
        with self._lock:
            self._cache[family] = path
        return path

    def _find(self, family: str) -> str | None:
        if self.fonts_dir is None:
            return None
        candidates = [self.fonts_dir / family]
        if not Path(family).suffix:
            candidates.extend(self.fonts_dir / f"{family}{suffix}" for suffix in FONT_SUFFIXES)
        for candidate in candidates:
            if candidate.is_file():
                return str(candidate)
        return None
