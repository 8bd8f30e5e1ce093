"""Namespaced key-value preference store with change subscriptions.

Preferences live in the ``preferences`` table as JSON-encoded values grouped
by namespace ("quotes", "common", provider-private areas). Writers go through
:class:`PreferenceArea`; readers subscribe to a :class:`ChangeStream` and
re-read the area whenever an event arrives.
"""

from __future__ import annotations

import json
import queue
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.storage.db import DatabaseManager

QUOTES_NAMESPACE = "quotes"
COMMON_NAMESPACE = "common"

PREF_QUOTES_TEXT = "text"
PREF_QUOTES_SOURCE = "source"
PREF_QUOTES_COLLECTED = "collected"
PREF_QUOTES_LAST_UPDATE = "last_update"

PREF_COMMON_FONT_SIZE_TEXT = "font_size_text"
PREF_COMMON_FONT_SIZE_SOURCE = "font_size_source"
PREF_COMMON_FONT_FAMILY = "font_family"
PREF_COMMON_FONT_FAMILY_DEFAULT = "default"

_CLOSED = object()


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One committed change in a preference area.

    Attributes:
        namespace: Area that changed.
        keys: Keys written by the change; empty when another process
            committed and the exact keys are unknown.
    """

    namespace: str
    keys: tuple[str, ...] = ()


class ChangeStream:
    """Queue-backed, logically infinite sequence of change events.

    Iteration blocks until the next event and ends only after :meth:`close`.
    A closed stream cannot be reopened; subscribe again for a fresh one.
    """

    def __init__(self, namespaces: frozenset[str], store: PreferenceStore) -> None:
        self.namespaces = namespaces
        self._store = store
        self._queue: queue.Queue[Any] = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, event: ChangeEvent) -> None:
        if not self._closed and event.namespace in self.namespaces:
            self._queue.put(event)

    def get(self, timeout: float | None = None) -> ChangeEvent | None:
        """Return the next event, or None on timeout or when closed."""
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._unsubscribe(self)
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[ChangeEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                self._queue.put(_CLOSED)
                return
            yield item


class PreferenceStore:
    """SQLite-backed preference store shared by all areas of one database."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        log.debug("Initializing PreferenceStore")
        self._db = db_manager
        self._areas: dict[str, PreferenceArea] = {}
        self._streams: list[ChangeStream] = []
        self._streams_lock = threading.Lock()
        self._data_version = db_manager.data_version()

    def area(self, namespace: str) -> PreferenceArea:
        """Return the (cached) area for ``namespace``."""
        with self._streams_lock:
            area = self._areas.get(namespace)
            if area is None:
                area = PreferenceArea(namespace, self)
                self._areas[namespace] = area
            return area

    def subscribe(self, *namespaces: str) -> ChangeStream:
        """Open a change stream for the given namespaces."""
        if not namespaces:
            raise ValueError("subscribe() requires at least one namespace")
        stream = ChangeStream(frozenset(namespaces), self)
        with self._streams_lock:
            self._streams.append(stream)
        return stream

    def poll_external(self) -> bool:
        """Emit events when another connection committed since the last poll.

        SQLite's ``data_version`` does not change for commits made through our
        own connection, so in-process writes are never reported twice.

        Returns:
            True when an external change was detected.
        """
        version = self._db.data_version()
        if version == self._data_version:
            return False
        self._data_version = version
        with self._streams_lock:
            namespaces = {ns for stream in self._streams for ns in stream.namespaces}
        log.debug("External preference change detected: namespaces=%s", sorted(namespaces))
        for namespace in sorted(namespaces):
            self._notify(ChangeEvent(namespace=namespace))
        return True

    def _unsubscribe(self, stream: ChangeStream) -> None:
        with self._streams_lock:
            if stream in self._streams:
                self._streams.remove(stream)

    def _notify(self, event: ChangeEvent) -> None:
        with self._streams_lock:
            streams = list(self._streams)
        for stream in streams:
            stream.put(event)

    def _read(self, namespace: str, keys: Iterable[str] | None = None) -> dict[str, Any]:
        with self._db.lock:
            conn = self._db.get_connection()
            if keys is None:
                rows = conn.execute(
                    "SELECT key, value FROM preferences WHERE namespace = ?",
                    (namespace,),
                ).fetchall()
            else:
                key_list = list(keys)
                if not key_list:
                    return {}
                placeholders = ",".join("?" for _ in key_list)
                rows = conn.execute(
                    f"SELECT key, value FROM preferences WHERE namespace = ? AND key IN ({placeholders})",
                    [namespace, *key_list],
                ).fetchall()
        return {key: json.loads(value) for key, value in rows}

    def _write(
        self,
        namespace: str,
        values: Mapping[str, Any],
        removed: Iterable[str] = (),
    ) -> tuple[str, ...]:
        """Apply writes and removals in one transaction; notify once if anything changed."""
        removed = tuple(removed)
        changed: list[str] = []
        with self._db.transaction() as conn:
            current = self._read(namespace, [*values.keys(), *removed])
            for key, value in values.items():
                if key in current and current[key] == value:
                    continue
                conn.execute(
                    """
                    INSERT INTO preferences (namespace, key, value)
                    VALUES (?, ?, ?)
                    ON CONFLICT(namespace, key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = CAST(strftime('%s','now') AS INTEGER)
                    """,
                    (namespace, key, json.dumps(value, ensure_ascii=False)),
                )
                changed.append(key)
            for key in removed:
                if key not in current:
                    continue
                conn.execute(
                    "DELETE FROM preferences WHERE namespace = ? AND key = ?",
                    (namespace, key),
                )
                changed.append(key)

        if changed:
            log.debug("Preferences changed: namespace=%s keys=%s", namespace, changed)
            self._notify(ChangeEvent(namespace=namespace, keys=tuple(changed)))
        return tuple(changed)


class PreferenceArea:
    """One namespace of the preference store."""

    def __init__(self, namespace: str, store: PreferenceStore) -> None:
        self.namespace = namespace
        self._store = store

    def get(self, key: str, default: Any = None) -> Any:
        return self._store._read(self.namespace, [key]).get(key, default)

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key)
        if value is None:
            return default
        return value if isinstance(value, str) else str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else default

    def snapshot(self) -> dict[str, Any]:
        """Return every key of this area from one consistent read."""
        return self._store._read(self.namespace)

    def set(self, key: str, value: Any) -> bool:
        """Write one key. Returns whether the stored value changed."""
        return bool(self._store._write(self.namespace, {key: value}))

    def update(self, values: Mapping[str, Any]) -> tuple[str, ...]:
        """Write several keys atomically; readers never see a partial update.

        Returns:
            Keys whose stored value changed.
        """
        return self._store._write(self.namespace, values)

    def remove(self, key: str) -> bool:
        return bool(self._store._write(self.namespace, {}, removed=(key,)))

    def clear(self) -> tuple[str, ...]:
        return self._store._write(self.namespace, {}, removed=tuple(self.snapshot().keys()))
