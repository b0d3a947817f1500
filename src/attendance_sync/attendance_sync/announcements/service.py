from __future__ import annotations

import uuid

from ..common.datetime_utils import epoch_millis, iso_day
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..store.store import AttendanceStore
from .model import Announcement


class AnnouncementService:
    def __init__(self, store: AttendanceStore):
        self._store = store

    def post(self, *, teacher_id: str, title: str, content: str) -> Announcement:
        """Publish an announcement with a snapshot of the teacher's profile."""

        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")

        teacher = self._store.users.get_by_id(teacher_id)
        if not teacher:
            raise ValidationError("Teacher does not exist")
        if teacher.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can post announcements")

        now = self._store.clock()
        announcement = Announcement(
            id=f"ann_{epoch_millis(now)}_{uuid.uuid4().hex[:6]}",
            title=title,
            content=content,
            teacher_id=teacher.id,
            date=iso_day(now),
            teacher_name=teacher.name or "Unknown Teacher",
            teacher_subject=teacher.subject or "Unknown Subject",
            teacher_department=teacher.department or teacher.assigned_class or "Unknown Department",
        )
        return self._store.announcements.add(announcement).unwrap()
