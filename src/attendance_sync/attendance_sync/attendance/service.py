from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from ..common.datetime_utils import epoch_millis, iso_day
from ..core.constants import LIVE_CODE_DIGITS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..store.store import AttendanceStore
from ..users.model import User
from .model import Attendance, LiveAttendanceCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveMarkResult:
    success: bool
    message: str
    attendance: Optional[Attendance] = None


def generate_live_code(digits: int = LIVE_CODE_DIGITS) -> str:
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))


class AttendanceService:
    """Use cases around marking attendance, including live self check-in."""

    def __init__(
        self,
        store: AttendanceStore,
        *,
        ttl_minutes: Optional[int] = None,
        code_factory: Callable[[], str] = generate_live_code,
    ):
        self._store = store
        self._ttl_minutes = int(ttl_minutes) if ttl_minutes is not None else store.live_code_ttl_minutes
        self._code_factory = code_factory

    def _new_id(self) -> str:
        return f"att_{epoch_millis(self._store.clock())}_{uuid.uuid4().hex[:6]}"

    def _placement(self, student: User) -> tuple[Optional[str], Optional[str]]:
        """Resolve the student's department name / section code to catalog ids."""

        department = next((d for d in self._store.departments.get_all() if d.name == student.department), None)
        if not department:
            return None, None
        section = next(
            (s for s in self._store.sections.by_department(department.id) if s.code == student.section),
            None,
        )
        return department.id, section.id if section else None

    def mark(
        self,
        *,
        student_id: str,
        subject_id: str,
        status: AttendanceStatus,
        day: Optional[str] = None,
        marked_by: Optional[str] = None,
    ) -> Attendance:
        status = AttendanceStatus(status)
        day = day or iso_day(self._store.clock())

        if self._store.attendance.find(student_id=student_id, day=day, subject_id=subject_id):
            raise ValidationError("Attendance is already marked for this subject and day")

        student = self._store.users.get_by_id(student_id)
        if not student:
            raise ValidationError("Student does not exist")

        department_id, section_id = self._placement(student)
        record = Attendance(
            id=self._new_id(),
            student_id=student_id,
            date=day,
            status=status,
            subject_id=subject_id,
            department_id=department_id,
            section_id=section_id,
            marked_by=marked_by,
        )
        return self._store.attendance.add(record).unwrap()

    def start_live_session(
        self,
        *,
        subject_id: str,
        teacher_id: str,
        code: Optional[str] = None,
    ) -> LiveAttendanceCode:
        """Open (or replace) the single live session."""

        code = code or self._code_factory()
        session = self._store.live_code.set(code, subject_id, teacher_id, ttl_minutes=self._ttl_minutes).unwrap()
        logger.info(f"Live attendance session opened for subject {subject_id} by {teacher_id}")
        return session

    def live_session(self) -> Optional[LiveAttendanceCode]:
        return self._store.live_code.get()

    def end_live_session(self) -> bool:
        return self._store.live_code.clear().ok

    def mark_live_attendance(self, student_id: str, code: str) -> LiveMarkResult:
        session = self._store.live_code.get()
        if not session:
            return LiveMarkResult(False, "No active attendance session")

        if session.code != str(code).strip():
            return LiveMarkResult(False, "Invalid attendance code")

        today = iso_day(self._store.clock())
        already = next(
            (
                a
                for a in self._store.attendance.get_all()
                if a.student_id == student_id
                and a.date == today
                and a.subject_id == session.subject_id
                and a.status != AttendanceStatus.HOLIDAY
            ),
            None,
        )
        if already:
            return LiveMarkResult(False, "Already marked for this subject today")

        student = next((s for s in self._store.users.students() if s.id == student_id), None)
        subject = self._store.subjects.get_by_id(session.subject_id)
        if not student or not subject:
            return LiveMarkResult(False, "Invalid student or subject")

        department_id, section_id = self._placement(student)
        record = Attendance(
            id=self._new_id(),
            student_id=student_id,
            date=today,
            status=AttendanceStatus.PRESENT,
            subject_id=session.subject_id,
            department_id=department_id,
            section_id=section_id,
            marked_by=session.teacher_id,
        )
        result = self._store.attendance.add(record)
        if not result.ok:
            logger.error(f"Error marking live attendance: {result.error}")
            return LiveMarkResult(False, "Error marking attendance")

        return LiveMarkResult(True, "Your Attendance is Captured Successfully", result.record)
