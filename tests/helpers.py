from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, List, Set

from src.attendance_sync.attendance_sync.core.exceptions import StorageWriteError, StoreError
from src.attendance_sync.attendance_sync.storage.memory_storage import MemoryStorage


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ManualTimer:
    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Timer factory for the persister; fire timers explicitly instead of waiting."""

    def __init__(self):
        self.created: List[ManualTimer] = []

    def __call__(self, interval: float, function: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, function)
        self.created.append(timer)
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.created if t.started and not t.cancelled and not t.fired]

    def fire_all(self) -> None:
        for timer in self.pending:
            timer.fired = True
            timer.function()


class FlakyStorage(MemoryStorage):
    """Memory storage whose reads, writes or removals can be made to fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.failing_writes = False
        self.failing_removes = False
        self.failing_reads: Set[str] = set()

    def get_item(self, key):
        if key in self.failing_reads:
            raise StoreError("database is locked", key=key)
        return super().get_item(key)

    def set_item(self, key, value):
        if self.failing_writes:
            raise StorageWriteError("disk full", key=key)
        super().set_item(key, value)

    def remove_item(self, key):
        if self.failing_removes:
            raise StorageWriteError("disk full", key=key)
        super().remove_item(key)
