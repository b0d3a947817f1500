from __future__ import annotations

import pytest

from src.attendance_sync.attendance_sync.attendance.model import Attendance
from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.core import constants as keys
from src.attendance_sync.attendance_sync.core.enums import AttendanceStatus, ChangeType, EntityType, FlushPolicy
from src.attendance_sync.attendance_sync.sync.hooks import RealtimeState
from tests.helpers import ManualTimers


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def tabs(settings, storage, hub, clock, timers, monkeypatch):
    monkeypatch.setattr(settings, "FLUSH_POLICY", "debounced")
    tab_a = build_container(settings=settings, storage=storage, hub=hub, clock=clock, timer_factory=timers)
    tab_b = build_container(settings=settings, storage=storage, hub=hub, clock=clock, timer_factory=timers)
    yield tab_a, tab_b
    tab_b.close()
    tab_a.close()


def _mark(mark_id="a1"):
    return Attendance(id=mark_id, student_id="student1", date="2024-01-10", status=AttendanceStatus.PRESENT, subject_id="sub1")


def test_other_tab_refreshes_only_after_the_save_lands(tabs, timers, storage):
    tab_a, tab_b = tabs
    assert tab_a.persister.policy == FlushPolicy.DEBOUNCED
    view = RealtimeState(tab_b.store.attendance.get_all, tab_b.fabric, [EntityType.ATTENDANCE]).start()

    tab_a.store.attendance.add(_mark("a1"))
    tab_a.store.attendance.add(_mark("a2"))

    assert view.refresh_count == 0
    assert storage.get_item(keys.ATTENDANCE_KEY) == "[]"
    assert [a.id for a in tab_a.store.attendance.get_all()] == ["a1", "a2"]

    timers.fire_all()

    assert view.refresh_count == 2
    assert [a.id for a in view.data] == ["a1", "a2"]
    view.stop()


def test_events_keep_the_user_who_made_the_change(tabs, timers, recorder):
    tab_a, tab_b = tabs
    events = recorder(tab_b.fabric, EntityType.ATTENDANCE)
    tab_a.auth_service.login("john@aams.com", "teacher123")

    tab_a.store.attendance.add(_mark())
    tab_a.auth_service.logout()
    timers.fire_all()

    assert [(e.type, e.user_id) for e in events] == [(ChangeType.ADD, "teacher1")]


def test_closing_a_tab_flushes_and_announces_pending_changes(settings, storage, hub, clock, timers, monkeypatch, recorder):
    monkeypatch.setattr(settings, "FLUSH_POLICY", "debounced")
    tab_a = build_container(settings=settings, storage=storage, hub=hub, clock=clock, timer_factory=timers)
    tab_b = build_container(settings=settings, storage=storage, hub=hub, clock=clock, timer_factory=timers)
    events = recorder(tab_b.fabric, EntityType.ATTENDANCE)

    tab_a.store.attendance.add(_mark())
    tab_a.close()

    assert len(events) == 1
    assert [a.id for a in tab_b.store.attendance.get_all()] == ["a1"]
    tab_b.close()


def test_live_code_event_waits_for_the_save(tabs, timers):
    tab_a, tab_b = tabs
    seen = []
    tab_b.fabric.subscribe(EntityType.LIVE_ATTENDANCE_CODE, lambda _e: seen.append(tab_b.store.live_code.get()))

    tab_a.store.live_code.set("123456", "sub1", "teacher1")
    assert seen == []

    timers.fire_all()

    assert seen[0].code == "123456"
