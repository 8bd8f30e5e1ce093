"""Display reconciliation: derive display state from the preference store.

The reconciler keeps no copy of the quote. Every pass re-reads the quote and
common areas and pushes one complete :class:`DisplayState` to the surface.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Mapping

from QuoteLock.core.models import DisplayState
from QuoteLock.storage.preferences import (
    COMMON_NAMESPACE,
    PREF_COMMON_FONT_FAMILY,
    PREF_COMMON_FONT_SIZE_SOURCE,
    PREF_COMMON_FONT_SIZE_TEXT,
    PREF_QUOTES_COLLECTED,
    PREF_QUOTES_SOURCE,
    PREF_QUOTES_TEXT,
    QUOTES_NAMESPACE,
    ChangeEvent,
)
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.context import DisplayContext
    from QuoteLock.display.resources import DisplayResources, FontResolver
    from QuoteLock.storage.preferences import ChangeStream

DISPLAY_NAMESPACES = (QUOTES_NAMESPACE, COMMON_NAMESPACE)

_RAIL_NEUTRAL_KEYS = frozenset({PREF_QUOTES_COLLECTED})


def compute_display_state(
    quote_values: Mapping[str, Any],
    common_values: Mapping[str, Any],
    resources: DisplayResources,
    fonts: FontResolver,
) -> DisplayState:
    """Compute the display state from the stored preferences.

    Args:
        quote_values: Snapshot of the quote area.
        common_values: Snapshot of the common area.
        resources: Resolved placeholder prompt, offsets and font defaults.
        fonts: Font family resolver.

    Returns:
        Placeholder state when no quote is stored, otherwise the showing state.
    """
    text = quote_values.get(PREF_QUOTES_TEXT)
    source = quote_values.get(PREF_QUOTES_SOURCE)
    showing = isinstance(text, str) and bool(text.strip()) and isinstance(source, str)

    if showing:
        quote_text, source_text = text, source
        collected = quote_values.get(PREF_QUOTES_COLLECTED) is True
        offset = resources.wide_offset
    else:
        quote_text, source_text = resources.placeholder_text, resources.placeholder_source
        collected = False
        offset = resources.narrow_offset

    return DisplayState(
        quote_text=quote_text,
        source_text=source_text,
        source_visible=bool(source_text),
        collect_icon_visible=showing,
        collect_icon_selected=showing and collected,
        layout_offset=offset,
        text_size=_font_size(common_values, PREF_COMMON_FONT_SIZE_TEXT, resources.default_text_size),
        source_size=_font_size(common_values, PREF_COMMON_FONT_SIZE_SOURCE, resources.default_source_size),
        font_path=fonts.resolve(_font_family(common_values)),
    )


def _font_size(values: Mapping[str, Any], key: str, default: int) -> int:
    raw = values.get(key)
    if raw is None:
        return default
    if isinstance(raw, bool):
        size = None
    elif isinstance(raw, int):
        size = raw
    else:
        try:
            size = int(str(raw).strip())
        except ValueError:
            size = None
    if size is None or size <= 0:
        log.warning("Invalid font size, using default: key=%s value=%r default=%d", key, raw, default)
        return default
    return size


def _font_family(values: Mapping[str, Any]) -> str | None:
    family = values.get(PREF_COMMON_FONT_FAMILY)
    return family if isinstance(family, str) else None


class DisplayReconciler:
    """Serialized reconciliation loop for one display.

    ``reconcile`` may be called from any thread; passes never interleave, so a
    rendered state never mixes data from two notifications.
    """

    def __init__(self, context: DisplayContext) -> None:
        self.context = context
        self._pass_lock = threading.Lock()
        self._phase: str | None = None
        self._stream: ChangeStream | None = None
        self._thread: threading.Thread | None = None

    @property
    def phase(self) -> str | None:
        return self._phase

    def reconcile(self, *, reset_rail: bool = True) -> DisplayState:
        """Run one full pass and render its result.

        Args:
            reset_rail: Close the action rail before rendering.

        Returns:
            The state sent to the surface.
        """
        ctx = self.context
        with self._pass_lock:
            state = compute_display_state(
                ctx.quote_area.snapshot(),
                ctx.common_area.snapshot(),
                ctx.resources,
                ctx.fonts,
            )
            if reset_rail:
                ctx.surface.reset_rail()
                ctx.surface.set_refreshing(False)
            ctx.surface.render(state)
            if state.phase != self._phase:
                log.info("Display phase: %s -> %s", self._phase or "initial", state.phase)
                self._phase = state.phase
        return state

    def handle(self, event: ChangeEvent) -> DisplayState:
        """Reconcile for one change event."""
        only_flag = (
            event.namespace == QUOTES_NAMESPACE
            and bool(event.keys)
            and set(event.keys) <= _RAIL_NEUTRAL_KEYS
        )
        log.debug("Reconciling for change: namespace=%s keys=%s", event.namespace, event.keys)
        return self.reconcile(reset_rail=not only_flag)

    def run(self, stream: ChangeStream) -> None:
        """Reconcile once now and then once per event until ``stream`` closes."""
        self.reconcile()
        for event in stream:
            try:
                self.handle(event)
            except Exception as e:  # noqa: BLE001 - keep the last rendered state
                log.error("Display reconciliation failed: %s", e)

    def start(self, stream: ChangeStream) -> None:
        """Run :meth:`run` on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stream = stream
        self._thread = threading.Thread(target=self.run, args=(stream,), name="quotelock-display", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
