from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one attendance mark for a student, subject and day.

    ``date`` is an ISO day string (YYYY-MM-DD); ``marked_at`` an ISO timestamp.
    """

    id: str
    student_id: str
    date: str
    status: AttendanceStatus
    subject_id: str
    department_id: Optional[str] = None
    section_id: Optional[str] = None
    marked_by: Optional[str] = None
    marked_at: Optional[str] = None


@dataclass(frozen=True)
class LiveAttendanceCode:
    """The single active self-check-in session. Times are epoch millis."""

    code: str
    subject_id: str
    teacher_id: str
    timestamp: int
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at < now_ms
