"""Rendering surfaces that receive display state.

Separates reconciliation logic from the concrete widget so the reconciler can
be driven and verified without a screen.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from QuoteLock.core.models import DisplayState
from QuoteLock.utils.log import log


class RenderSurface(ABC):
    """Abstract base class for surfaces showing the quote and action rail."""

    @abstractmethod
    def render(self, state: DisplayState) -> None:
        """Apply one full display state in a single pass.

        Args:
            state: Complete state; partial updates are never sent.
        """

    @abstractmethod
    def displayed(self) -> DisplayState | None:
        """Return the last rendered state, or None before the first render."""

    @abstractmethod
    def open_rail(self, offset: float) -> None:
        """Slide the action rail open to ``offset``."""

    @abstractmethod
    def reset_rail(self) -> None:
        """Close the action rail."""

    @abstractmethod
    def set_refreshing(self, refreshing: bool) -> None:
        """Show or hide the refreshing indicator."""

    @property
    @abstractmethod
    def rail_offset(self) -> float:
        """Current rail offset; 0 when closed."""


class ConsoleSurface(RenderSurface):
    """Surface that records state and writes it through the logger."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: DisplayState | None = None
        self._rail_offset = 0.0
        self._refreshing = False
        self.render_count = 0

    def render(self, state: DisplayState) -> None:
        with self._lock:
            self._state = state
            self.render_count += 1
        for line in render_state_text(state).splitlines():
            log.info(line)

    def displayed(self) -> DisplayState | None:
        with self._lock:
            return self._state

    def open_rail(self, offset: float) -> None:
        with self._lock:
            self._rail_offset = offset
        log.debug("Action rail opened: offset=%s", offset)

    def reset_rail(self) -> None:
        with self._lock:
            changed = self._rail_offset != 0.0
            self._rail_offset = 0.0
        if changed:
            log.debug("Action rail reset")

    def set_refreshing(self, refreshing: bool) -> None:
        with self._lock:
            self._refreshing = refreshing

    @property
    def rail_offset(self) -> float:
        with self._lock:
            return self._rail_offset

    @property
    def refreshing(self) -> bool:
        with self._lock:
            return self._refreshing


def render_state_text(state: DisplayState) -> str:
    """Render a display state into a short human-readable block."""
    lines = [state.quote_text]
    if state.source_visible:
        lines.append(f"    {state.source_text}")
    if state.collect_icon_visible:
        mark = "collected" if state.collect_icon_selected else "not collected"
        lines.append(f"    [{mark}]")
    return "\n".join(lines) + "\n"
