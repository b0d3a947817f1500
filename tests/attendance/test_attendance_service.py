from __future__ import annotations

import pytest

from src.attendance_sync.attendance_sync.attendance.service import AttendanceService, generate_live_code
from src.attendance_sync.attendance_sync.core.enums import AttendanceStatus
from src.attendance_sync.attendance_sync.core.exceptions import ValidationError


@pytest.fixture
def service(store):
    return AttendanceService(store, code_factory=lambda: "424242")


def test_generated_codes_have_six_digits():
    for _ in range(20):
        code = generate_live_code()
        assert len(code) == 6
        assert code.isdigit()


def test_mark_resolves_department_and_section_ids(service):
    record = service.mark(student_id="student2", subject_id="sub1", status=AttendanceStatus.ABSENT, marked_by="teacher1")

    assert record.date == "2024-01-10"
    assert record.department_id == "dept1"
    assert record.section_id == "sec2"
    assert record.marked_by == "teacher1"
    assert record.id.startswith("att_")


def test_mark_rejects_duplicate_for_same_day_and_subject(service):
    service.mark(student_id="student1", subject_id="sub1", status="present")

    with pytest.raises(ValidationError):
        service.mark(student_id="student1", subject_id="sub1", status="late")

    service.mark(student_id="student1", subject_id="sub2", status="late")
    service.mark(student_id="student1", subject_id="sub1", status="present", day="2024-01-11")


def test_mark_requires_existing_student(service):
    with pytest.raises(ValidationError):
        service.mark(student_id="ghost", subject_id="sub1", status="present")


def test_live_check_in_happy_path(service, store):
    session = service.start_live_session(subject_id="sub1", teacher_id="teacher1")
    assert session.code == "424242"

    result = service.mark_live_attendance("student1", " 424242 ")

    assert result.success
    assert result.message == "Your Attendance is Captured Successfully"
    assert result.attendance.status == AttendanceStatus.PRESENT
    assert result.attendance.marked_by == "teacher1"
    assert store.attendance.for_student("student1") == [result.attendance]


def test_live_check_in_rejections(service, clock):
    assert service.mark_live_attendance("student1", "424242").message == "No active attendance session"

    service.start_live_session(subject_id="sub1", teacher_id="teacher1")
    assert service.mark_live_attendance("student1", "000000").message == "Invalid attendance code"
    assert service.mark_live_attendance("teacher1", "424242").message == "Invalid student or subject"

    assert service.mark_live_attendance("student1", "424242").success
    assert service.mark_live_attendance("student1", "424242").message == "Already marked for this subject today"

    clock.advance(minutes=61)
    assert service.mark_live_attendance("student3", "424242").message == "No active attendance session"


def test_live_session_for_unknown_subject(service):
    service.start_live_session(subject_id="nope", teacher_id="teacher1")

    assert service.mark_live_attendance("student1", "424242").message == "Invalid student or subject"


def test_ending_live_session(service):
    service.start_live_session(subject_id="sub1", teacher_id="teacher1")

    assert service.end_live_session() is True
    assert service.live_session() is None
