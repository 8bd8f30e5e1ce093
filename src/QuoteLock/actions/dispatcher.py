"""Action dispatcher for refresh, collect and rail gestures."""

from __future__ import annotations

from typing import TYPE_CHECKING

from QuoteLock.core.models import CollectionResult, RefreshResult, Success, build_collection_entry
from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.actions.channels import CollectionChannel, RefreshChannel
    from QuoteLock.context import DisplayContext


class ActionDispatcher:
    """Translate surface events into channel requests.

    Visual changes are optimistic. A rejected collection request is rolled back
    once on the surface and never retried automatically.
    """

    def __init__(
        self,
        context: DisplayContext,
        refresh_channel: RefreshChannel,
        collection_channel: CollectionChannel,
    ) -> None:
        self.context = context
        self.refresh_channel = refresh_channel
        self.collection_channel = collection_channel

    def trigger_refresh(self) -> None:
        """Show the refreshing indicator and fire a forced refresh.

        A new quote reaches the surface through the reconciler, which also
        stops the indicator. When the refresh ends without a new quote the
        indicator is stopped here and the last quote stays on screen.
        """
        surface = self.context.surface
        surface.set_refreshing(True)
        try:
            self.refresh_channel.trigger(on_done=self._refresh_finished)
        except Exception as e:  # noqa: BLE001 - the trigger is fire-and-forget
            log.error("Refresh trigger failed: %s", e)
            surface.set_refreshing(False)

    def _refresh_finished(self, result: RefreshResult | None) -> None:
        if isinstance(result, Success):
            return
        log.info("Refresh failed, keeping last quote: %s", result)
        self.context.surface.set_refreshing(False)

    def collect(self, text: str, source: str) -> CollectionResult:
        """Save a quote to the collection.

        Args:
            text: Displayed quote text.
            source: Quote source, attribution glyph allowed.

        Returns:
            The channel's result; rejected results have already been rolled back.
        """
        entry = build_collection_entry(text, source)
        result = self.collection_channel.insert(entry)
        if result.ok:
            log.info("Quote collected: id=%d", result.value)
        else:
            self._rollback("collect", result)
        return result

    def uncollect(self, text: str, source: str) -> CollectionResult:
        """Remove a quote from the collection."""
        entry = build_collection_entry(text, source)
        result = self.collection_channel.delete(entry.fingerprint)
        if result.ok:
            log.info("Quote uncollected: rows=%d", result.value)
        else:
            self._rollback("uncollect", result)
        return result

    def on_refresh_tap(self) -> None:
        self.trigger_refresh()

    def on_collect_tap(self, currently_selected: bool) -> CollectionResult | None:
        """Toggle the collection state of the displayed quote.

        Args:
            currently_selected: Whether the collect icon was selected before the tap.

        Returns:
            The collection result, or None when no quote is displayed.
        """
        state = self.context.surface.displayed()
        if state is None or not state.collect_icon_visible:
            log.debug("Collect tap ignored: no quote displayed")
            return None
        # Both values from one rendered state.
        if currently_selected:
            return self.uncollect(state.quote_text, state.source_text)
        return self.collect(state.quote_text, state.source_text)

    def on_container_long_press(self) -> bool:
        """Toggle the action rail.

        Returns:
            True when the rail is open after the gesture.
        """
        surface = self.context.surface
        if surface.rail_offset != 0.0:
            surface.reset_rail()
            return False
        state = surface.displayed()
        offset = state.layout_offset if state is not None else self.context.resources.narrow_offset
        surface.open_rail(offset)
        return True

    def _rollback(self, action: str, result: CollectionResult) -> None:
        log.warning("%s rejected, rolling back: %s", action.capitalize(), result.error)
        surface = self.context.surface
        surface.reset_rail()
        surface.set_refreshing(False)
