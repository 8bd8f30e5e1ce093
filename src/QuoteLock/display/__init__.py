"""Display layer: resources, rendering surfaces and the reconciler."""

from __future__ import annotations

from QuoteLock.display.reconciler import DISPLAY_NAMESPACES, DisplayReconciler, compute_display_state
from QuoteLock.display.resources import DisplayResources, FontResolver, resolve_display_resources
from QuoteLock.display.surface import ConsoleSurface, RenderSurface, render_state_text

__all__ = [
    "DISPLAY_NAMESPACES",
    "ConsoleSurface",
    "DisplayReconciler",
    "DisplayResources",
    "FontResolver",
    "RenderSurface",
    "compute_display_state",
    "render_state_text",
    "resolve_display_resources",
]
