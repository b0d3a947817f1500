from __future__ import annotations

import pytest

from src.attendance_sync.attendance_sync.core.enums import ChangeType, EntityType, Role
from src.attendance_sync.attendance_sync.core.exceptions import AuthorizationError, ValidationError
from src.attendance_sync.attendance_sync.sync.hooks import RealtimeNotification


def test_post_snapshots_teacher_profile(container):
    announcement = container.announcement_service.post(
        teacher_id="teacher1", title="Quiz", content="Quiz on Friday"
    )

    assert announcement.teacher_name == "Dr. John Smith"
    assert announcement.teacher_subject == "Mathematics"
    assert announcement.teacher_department == "B.Tech CSE - A"
    assert announcement.date == "2024-01-10"

    container.store.users.update("teacher1", name="Dr. J. Smith").unwrap()
    stored = container.store.announcements.get_by_id(announcement.id)
    assert stored.teacher_name == "Dr. John Smith"


def test_post_falls_back_to_unknown_labels(container):
    container.user_service.create_account(
        name="New Teacher", email="new@aams.com", password="secret99", role=Role.TEACHER, user_id="teacher9"
    )

    announcement = container.announcement_service.post(teacher_id="teacher9", title="Hi", content="Hello")

    assert announcement.teacher_subject == "Unknown Subject"
    assert announcement.teacher_department == "Unknown Department"


def test_post_requires_teacher_and_content(container):
    with pytest.raises(AuthorizationError):
        container.announcement_service.post(teacher_id="student1", title="Hi", content="Hello")
    with pytest.raises(ValidationError):
        container.announcement_service.post(teacher_id="ghost", title="Hi", content="Hello")
    with pytest.raises(ValidationError):
        container.announcement_service.post(teacher_id="teacher1", title="  ", content="Hello")


def test_students_see_new_announcements_in_other_tab(container, other_tab):
    note = RealtimeNotification(other_tab.fabric, [EntityType.ANNOUNCEMENT], clock=other_tab.store.clock).start()
    container.auth_service.login("john@aams.com", "teacher123")

    container.announcement_service.post(teacher_id="teacher1", title="Quiz", content="Quiz on Friday")

    assert note.current.type == ChangeType.ADD
    assert note.current.user_id == "teacher1"
    assert note.current.source == Role.TEACHER
    assert [a.title for a in other_tab.store.announcements.for_students()] == ["Quiz"]
    note.stop()
