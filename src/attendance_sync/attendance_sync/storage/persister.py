"""Single write path between collections and the storage backend.

With ``FlushPolicy.IMMEDIATE`` every write lands synchronously. With
``FlushPolicy.DEBOUNCED`` writes are coalesced per key: a serialized snapshot
is kept and written once the key has been quiet for the debounce window.
Reads always see the newest snapshot, pending or not.

Callers that must not announce a change before other contexts can read it
register a ``when_written`` callback; it runs once the key's snapshot has
reached the backend.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.constants import DEFAULT_DEBOUNCE_MS
from ..core.enums import FlushPolicy
from ..core.exceptions import StorageWriteError
from .backend import KeyValueStorage

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]
WrittenCallback = Callable[[], None]


class Persister:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        policy: FlushPolicy = FlushPolicy.IMMEDIATE,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self._storage = storage
        self._policy = FlushPolicy(policy)
        self._debounce_ms = int(debounce_ms)
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.RLock()
        self._pending: Dict[str, str] = {}
        self._timers: Dict[str, Any] = {}
        self._failed: Set[str] = set()
        self._on_written: Dict[str, List[WrittenCallback]] = {}

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    @property
    def policy(self) -> FlushPolicy:
        return self._policy

    @property
    def failed_keys(self) -> Set[str]:
        with self._lock:
            return set(self._failed)

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            if key in self._pending:
                return self._pending[key]
        return self._storage.get_item(key)

    def write(self, key: str, text: str, *, immediate: bool = False) -> None:
        if immediate or self._policy == FlushPolicy.IMMEDIATE:
            with self._lock:
                # A failed write leaves any pending snapshot and its timer in place.
                self._storage.set_item(key, text)
                self._cancel(key)
                self._pending.pop(key, None)
                self._failed.discard(key)
                callbacks = self._on_written.pop(key, [])
            self._run_callbacks(key, callbacks)
            return
        self._schedule(key, text, self._debounce_ms)

    def remove(self, key: str) -> None:
        with self._lock:
            self._storage.remove_item(key)
            self._cancel(key)
            self._pending.pop(key, None)
            self._failed.discard(key)
            callbacks = self._on_written.pop(key, [])
        self._run_callbacks(key, callbacks)

    def when_written(self, key: str, callback: WrittenCallback) -> None:
        """Run ``callback`` once the newest snapshot of ``key`` is in the backend.

        Runs right away when nothing is pending for ``key``.
        """

        with self._lock:
            if key in self._pending:
                self._on_written.setdefault(key, []).append(callback)
                return
        self._run_callbacks(key, [callback])

    def schedule_save(self, key: str, data: Any, debounce_ms: Optional[int] = None) -> None:
        """Coalesce saves of ``data`` under ``key``; only the last call in a window is written."""

        text = data if isinstance(data, str) else json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        self._schedule(key, text, self._debounce_ms if debounce_ms is None else int(debounce_ms))

    def has_pending(self, key: Optional[str] = None) -> bool:
        with self._lock:
            return bool(self._pending) if key is None else key in self._pending

    def flush(self) -> List[StorageWriteError]:
        """Write every pending snapshot now. Returns the failures, if any."""

        with self._lock:
            keys = list(self._pending)
            for key in keys:
                self._cancel(key)

        errors: List[StorageWriteError] = []
        for key in keys:
            error = self._write_pending(key)
            if error is not None:
                errors.append(error)
        return errors

    def close(self) -> List[StorageWriteError]:
        errors = self.flush()
        with self._lock:
            for key in list(self._timers):
                self._cancel(key)
            dropped = sum(len(cbs) for cbs in self._on_written.values())
            self._on_written.clear()
        if dropped:
            logger.warning(f"{dropped} change notification(s) dropped for unsaved keys")
        return errors

    def _schedule(self, key: str, text: str, debounce_ms: int) -> None:
        with self._lock:
            self._cancel(key)
            self._pending[key] = text
            timer = self._timer_factory(debounce_ms / 1000.0, lambda: self._on_timer(key))
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _on_timer(self, key: str) -> None:
        with self._lock:
            self._timers.pop(key, None)
        self._write_pending(key)

    def _write_pending(self, key: str) -> Optional[StorageWriteError]:
        with self._lock:
            text = self._pending.get(key)
            if text is None:
                return None
            try:
                self._storage.set_item(key, text)
            except StorageWriteError as e:
                # Keep the snapshot so readers still see it and a later flush can retry.
                self._failed.add(key)
                logger.error(f"Failed to save {key}: {e}")
                return e
            self._pending.pop(key, None)
            self._failed.discard(key)
            callbacks = self._on_written.pop(key, [])
            logger.debug(f"Auto-saved: {key}")
        self._run_callbacks(key, callbacks)
        return None

    def _run_callbacks(self, key: str, callbacks: List[WrittenCallback]) -> None:
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Write callback for {key} failed: {e}", exc_info=True)

    def _cancel(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
