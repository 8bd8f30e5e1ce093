"""Display context shared by the reconciler and the action dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from QuoteLock.display.resources import DisplayResources, FontResolver, resolve_display_resources
from QuoteLock.display.surface import ConsoleSurface, RenderSurface
from QuoteLock.storage.preferences import COMMON_NAMESPACE, QUOTES_NAMESPACE

if TYPE_CHECKING:
    from QuoteLock.config import AppConfig
    from QuoteLock.storage.preferences import PreferenceArea, PreferenceStore


@dataclass(frozen=True, slots=True)
class DisplayContext:
    """Everything a display pass reads from or writes to.

    Built once at startup and passed explicitly; nothing here is looked up
    from globals.
    """

    quote_area: PreferenceArea
    common_area: PreferenceArea
    surface: RenderSurface
    resources: DisplayResources
    fonts: FontResolver


def create_display_context(
    config: AppConfig,
    preferences: PreferenceStore,
    surface: RenderSurface | None = None,
) -> DisplayContext:
    """Create the display context from configuration.

    Raises:
        ConfigurationError: If display resources are invalid.
    """
    resources = resolve_display_resources(config.display)
    return DisplayContext(
        quote_area=preferences.area(QUOTES_NAMESPACE),
        common_area=preferences.area(COMMON_NAMESPACE),
        surface=surface if surface is not None else ConsoleSurface(),
        resources=resources,
        fonts=FontResolver(resources.fonts_dir),
    )
