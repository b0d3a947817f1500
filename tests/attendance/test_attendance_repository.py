from __future__ import annotations

from src.attendance_sync.attendance_sync.attendance.model import Attendance
from src.attendance_sync.attendance_sync.core import constants as keys
from src.attendance_sync.attendance_sync.core.enums import AttendanceStatus, ChangeType, EntityType, ResultStatus
from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.sync.hooks import RealtimeState
from tests.helpers import FlakyStorage


def _mark(mark_id="a1", student_id="student1", day="2024-01-10", status=AttendanceStatus.PRESENT, **extra):
    return Attendance(id=mark_id, student_id=student_id, date=day, status=status, subject_id="sub1", **extra)


def test_add_enriches_marked_by_and_marked_at(store):
    store.start_session("teacher1")

    record = store.attendance.add(_mark()).unwrap()

    assert record.marked_by == "teacher1"
    assert record.marked_at == "2024-01-10T09:00:00.000"


def test_add_keeps_explicit_marker(store):
    store.start_session("teacher1")

    record = store.attendance.add(_mark(marked_by="teacher2")).unwrap()

    assert record.marked_by == "teacher2"


def test_queries_filter_by_student_subject_and_placement(store):
    store.attendance.add(_mark("a1", department_id="dept1", section_id="sec1"))
    store.attendance.add(_mark("a2", student_id="student2", department_id="dept1", section_id="sec2"))
    store.attendance.add(_mark("a3", day="2024-01-11", department_id="dept1", section_id="sec1"))

    assert [a.id for a in store.attendance.for_student("student1")] == ["a1", "a3"]
    assert len(store.attendance.for_subject("sub1")) == 3
    assert [a.id for a in store.attendance.by_section("sec2")] == ["a2"]
    assert [a.id for a in store.attendance.by_department_and_date("dept1", "2024-01-10")] == ["a1", "a2"]
    assert store.attendance.find(student_id="student1", day="2024-01-11", subject_id="sub1").id == "a3"
    assert store.attendance.find(student_id="student3", day="2024-01-11", subject_id="sub1") is None


def test_write_in_one_tab_refreshes_view_in_another(store, other_tab):
    view = RealtimeState(store.attendance.get_all, store.fabric, [EntityType.ATTENDANCE]).start()
    assert view.data == []

    other_tab.store.attendance.add(_mark())

    assert [a.id for a in view.data] == ["a1"]
    assert view.refresh_count == 1
    view.stop()


def test_publisher_also_receives_its_own_event(store, recorder):
    events = recorder(store.fabric, EntityType.ATTENDANCE)

    store.attendance.add(_mark())

    assert [e.type for e in events] == [ChangeType.ADD]


def test_live_code_round_trip_and_lazy_expiry(store, storage, clock):
    session = store.live_code.set("123456", "sub1", "teacher1", ttl_minutes=60).unwrap()

    assert session.expires_at - session.timestamp == 60 * 60 * 1000
    assert store.live_code.get() == session

    clock.advance(minutes=60)
    assert store.live_code.get() == session

    clock.advance(minutes=1)
    assert store.live_code.get() is None
    assert store.live_code.get_raw() == session
    assert storage.get_item(keys.LIVE_ATTENDANCE_CODE_KEY) is not None


def test_live_code_events_use_their_own_channel(store, recorder):
    attendance_events = recorder(store.fabric, EntityType.ATTENDANCE)
    code_events = recorder(store.fabric, EntityType.LIVE_ATTENDANCE_CODE)

    store.live_code.set("123456", "sub1", "teacher1")
    assert store.live_code.clear().ok
    assert store.live_code.clear().status == ResultStatus.NOT_FOUND

    assert attendance_events == []
    assert [e.type for e in code_events] == [ChangeType.ADD, ChangeType.DELETE]
    assert code_events[0].user_id == "teacher1"
    assert code_events[0].data["code"] == "123456"


def test_unreadable_live_code_is_treated_as_absent(store, storage):
    storage.set_item(keys.LIVE_ATTENDANCE_CODE_KEY, "not-json")

    assert store.live_code.get() is None


def test_failed_live_code_removal_is_reported_and_not_broadcast(settings, hub, clock, recorder):
    storage = FlakyStorage()
    c = build_container(settings=settings, storage=storage, hub=hub, clock=clock)
    events = recorder(c.fabric, EntityType.LIVE_ATTENDANCE_CODE)
    c.store.live_code.set("123456", "sub1", "teacher1")

    storage.failing_removes = True
    result = c.store.live_code.clear()

    assert result.status == ResultStatus.WRITE_FAILED
    assert c.store.live_code.get().code == "123456"
    assert [e.type for e in events] == [ChangeType.ADD]
    assert c.attendance_service.end_live_session() is False
    c.close()
