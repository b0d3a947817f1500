from __future__ import annotations

from typing import Iterable, List

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import ValidationError
from ..store.store import AttendanceStore
from .model import CourseRegistration, RegisteredCourses


class RegistrationService:
    """Student course registration against an admin-managed window.

    Checking the window and saving the courses are two separate store calls;
    another context may close the window in between.
    """

    def __init__(self, store: AttendanceStore):
        self._store = store

    def _deadline_passed(self, window: CourseRegistration) -> bool:
        if not window.deadline:
            return False
        return parse_iso_date(window.deadline[:10]) < self._store.clock().date()

    def available_windows(self) -> List[CourseRegistration]:
        return [r for r in self._store.course_registrations.open_windows() if not self._deadline_passed(r)]

    def register_courses(self, *, student_id: str, course_ids: Iterable[str], registration_id: str) -> RegisteredCourses:
        window = self._store.course_registrations.get_by_id(registration_id)
        if not window:
            raise ValidationError("Registration window does not exist")
        if not window.is_open:
            raise ValidationError("Registration is closed")
        if self._deadline_passed(window):
            raise ValidationError("Registration deadline has passed")

        course_ids = list(dict.fromkeys(course_ids))
        catalog = {m.id for m in self._store.master_subjects.by_department(window.department_id)}
        unknown = [c for c in course_ids if c not in catalog]
        if unknown:
            raise ValidationError(f"Unknown courses for this department: {', '.join(unknown)}")

        return self._store.registered_courses.register(student_id, course_ids).unwrap()

    def drop_courses(self, *, student_id: str, course_ids: Iterable[str]) -> RegisteredCourses:
        return self._store.registered_courses.unregister(student_id, course_ids).unwrap()
