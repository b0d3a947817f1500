from __future__ import annotations

import threading
from typing import Dict, List, Optional

from ..core.exceptions import StorageWriteError


class MemoryStorage:
    """Dict-backed storage shared by every context in one process.

    ``quota_bytes`` caps the summed size of keys and values, the way a browser
    profile caps its local storage.
    """

    def __init__(self, *, quota_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self._quota = quota_bytes
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageWriteError(f"Value for {key!r} must be a string", key=key)

        with self._lock:
            if self._quota is not None:
                used = self._used_bytes() - self._entry_size(key, self._items.get(key))
                if used + self._entry_size(key, value) > self._quota:
                    raise StorageWriteError(f"Storage quota exceeded while writing {key!r}", key=key)
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    @property
    def used_bytes(self) -> int:
        with self._lock:
            return self._used_bytes()

    def _used_bytes(self) -> int:
        return sum(self._entry_size(k, v) for k, v in self._items.items())

    @staticmethod
    def _entry_size(key: str, value: Optional[str]) -> int:
        if value is None:
            return 0
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))
