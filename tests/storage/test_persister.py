from __future__ import annotations

import pytest

from src.attendance_sync.attendance_sync.core.enums import FlushPolicy
from src.attendance_sync.attendance_sync.core.exceptions import StorageWriteError
from src.attendance_sync.attendance_sync.storage.memory_storage import MemoryStorage
from src.attendance_sync.attendance_sync.storage.persister import Persister
from tests.helpers import FlakyStorage, ManualTimers


class CountingStorage(MemoryStorage):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.writes: list[str] = []

    def set_item(self, key, value):
        super().set_item(key, value)
        self.writes.append(key)


def test_immediate_policy_writes_synchronously():
    storage = CountingStorage()
    persister = Persister(storage)

    persister.write("aams_users", "[]")

    assert storage.get_item("aams_users") == "[]"
    assert storage.writes == ["aams_users"]
    assert not persister.has_pending()


def test_debounced_policy_coalesces_per_key():
    storage = CountingStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, debounce_ms=500, timer_factory=timers)

    persister.write("aams_attendance", "[1]")
    persister.write("aams_attendance", "[1,2]")
    persister.write("aams_subjects", "[]")

    assert storage.writes == []
    assert len(timers.pending) == 2
    assert timers.created[0].cancelled
    assert timers.created[0].interval == 0.5

    timers.fire_all()

    assert storage.get_item("aams_attendance") == "[1,2]"
    assert sorted(storage.writes) == ["aams_attendance", "aams_subjects"]


def test_reads_see_pending_snapshot():
    storage = MemoryStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)

    persister.write("aams_users", '["pending"]')

    assert storage.get_item("aams_users") is None
    assert persister.read("aams_users") == '["pending"]'


def test_schedule_save_serializes_snapshot_at_call_time():
    storage = MemoryStorage()
    timers = ManualTimers()
    persister = Persister(storage, timer_factory=timers)
    data = [{"id": "a1"}]

    persister.schedule_save("aams_attendance", data, debounce_ms=10)
    data.append({"id": "a2"})
    timers.fire_all()

    assert storage.get_item("aams_attendance") == '[{"id":"a1"}]'
    assert timers.created[0].interval == 0.01


def test_flush_writes_pending_and_cancels_timers():
    storage = MemoryStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)
    persister.write("k", "v")

    errors = persister.flush()

    assert errors == []
    assert storage.get_item("k") == "v"
    assert timers.pending == []


def test_failed_debounced_write_is_kept_and_reported():
    storage = MemoryStorage(quota_bytes=10)
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)

    persister.write("key", "x" * 100)
    timers.fire_all()

    assert persister.failed_keys == {"key"}
    assert persister.read("key") == "x" * 100
    assert len(persister.flush()) == 1


def test_immediate_write_cancels_pending_debounced_save():
    storage = MemoryStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)

    persister.write("aams_current_user", "old")
    persister.write("aams_current_user", "new", immediate=True)
    timers.fire_all()

    assert storage.get_item("aams_current_user") == "new"


def test_when_written_runs_at_once_without_pending_snapshot():
    persister = Persister(MemoryStorage())
    calls = []

    persister.write("k", "v")
    persister.when_written("k", lambda: calls.append("k"))

    assert calls == ["k"]


def test_when_written_waits_for_debounced_save():
    storage = MemoryStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)
    seen = []

    persister.write("k", "v1")
    persister.when_written("k", lambda: seen.append(storage.get_item("k")))
    persister.write("k", "v2")
    assert seen == []

    timers.fire_all()

    assert seen == ["v2"]


def test_when_written_waits_through_failed_flush():
    storage = FlakyStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)
    calls = []
    persister.write("k", "v")
    persister.when_written("k", lambda: calls.append(1))

    storage.failing_writes = True
    timers.fire_all()
    assert calls == []

    storage.failing_writes = False
    assert persister.flush() == []
    assert calls == [1]


def test_failed_immediate_write_keeps_pending_snapshot():
    storage = FlakyStorage()
    timers = ManualTimers()
    persister = Persister(storage, policy=FlushPolicy.DEBOUNCED, timer_factory=timers)
    persister.write("k", "pending")

    storage.failing_writes = True
    with pytest.raises(StorageWriteError):
        persister.write("k", "now", immediate=True)

    assert persister.read("k") == "pending"
    assert len(timers.pending) == 1
