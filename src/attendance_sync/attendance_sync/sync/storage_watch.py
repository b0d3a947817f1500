"""Notice raw storage writes that did not come through a repository.

Change events cover repository mutations only. A backup restore or a seed
run from another process sharing the SQLite file writes keys directly, and
no event is published for it. ``StorageWatcher`` polls the keys under a
prefix and reports every key whose value changed since the last poll.
Removed keys are not reported.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..common.codec import loads
from ..core.constants import DEFAULT_STORAGE_WATCH_INTERVAL_MS
from ..core.exceptions import DeserializationError, StoreError
from ..storage.backend import KeyValueStorage
from ..storage.persister import TimerFactory

logger = logging.getLogger(__name__)

KeyChangeHandler = Callable[[str, Any], None]


class StorageWatcher:
    """Calls ``on_change(key, value)`` for changed keys; ``value`` is decoded JSON when possible."""

    def __init__(
        self,
        storage: KeyValueStorage,
        on_change: KeyChangeHandler,
        *,
        prefix: str = "aams_",
        interval_ms: int = DEFAULT_STORAGE_WATCH_INTERVAL_MS,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self._storage = storage
        self._on_change = on_change
        self._prefix = prefix
        self._interval = int(interval_ms) / 1000.0
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._snapshot: Dict[str, str] = {}
        self._timer: Any = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def prime(self) -> None:
        """Take the baseline snapshot later polls compare against."""

        with self._lock:
            self._snapshot = self._read()

    def start(self) -> "StorageWatcher":
        if self._running:
            return self
        self.prime()
        self._running = True
        self._schedule()
        return self

    def stop(self) -> None:
        self._running = False
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def __enter__(self) -> "StorageWatcher":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def poll(self) -> List[str]:
        """Compare storage with the last snapshot, notify, and return the changed keys."""

        with self._lock:
            current = self._read()
            changed = sorted(k for k, v in current.items() if self._snapshot.get(k) != v)
            self._snapshot = current

        for key in changed:
            self._notify(key, current[key])
        return changed

    def _read(self) -> Dict[str, str]:
        values: Dict[str, str] = {}
        for key in self._storage.keys():
            if not key.startswith(self._prefix):
                continue
            value = self._storage.get_item(key)
            if value is not None:
                values[key] = value
        return values

    def _notify(self, key: str, raw: str) -> None:
        try:
            value = loads(raw, key=key)
        except DeserializationError:
            value = raw
        try:
            self._on_change(key, value)
        except Exception as e:
            logger.error(f"Storage change handler for {key} failed: {e}", exc_info=True)

    def _schedule(self) -> None:
        timer = self._timer_factory(self._interval, self._tick)
        if hasattr(timer, "daemon"):
            timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self) -> None:
        if not self._running:
            return
        try:
            self.poll()
        except StoreError as e:
            logger.warning(f"Storage poll failed: {e}")
        if self._running:
            self._schedule()
