from __future__ import annotations

import dataclasses
from typing import Iterable, List, Optional

from ..core.enums import ChangeType, ResultStatus
from ..core.exceptions import NotFoundError
from ..core.results import MutationResult
from ..store.collection import Collection
from .model import CourseRegistration, RegisteredCourses


class CourseRegistrationRepository:
    def __init__(self, registrations: Collection[CourseRegistration]):
        self._registrations = registrations

    @property
    def collection(self) -> Collection[CourseRegistration]:
        return self._registrations

    def get_all(self) -> List[CourseRegistration]:
        return self._registrations.get_all()

    def get_by_id(self, registration_id: str) -> Optional[CourseRegistration]:
        return self._registrations.get_by_id(registration_id)

    def open_windows(self) -> List[CourseRegistration]:
        return self._registrations.filter(lambda r: r.is_open)

    def by_department(self, department_id: str) -> List[CourseRegistration]:
        return self._registrations.filter(lambda r: r.department_id == department_id)

    def add(self, registration: CourseRegistration) -> MutationResult[CourseRegistration]:
        return self._registrations.add(registration)

    def update(
        self, registration_id: str, *, expected: Optional[CourseRegistration] = None, **changes
    ) -> MutationResult[CourseRegistration]:
        return self._registrations.update(registration_id, changes, expected=expected)

    def delete(self, registration_id: str) -> MutationResult[CourseRegistration]:
        return self._registrations.delete(registration_id)


class RegisteredCoursesRepository:
    """Per-student course lists, keyed by ``student_id``."""

    def __init__(self, registered: Collection[RegisteredCourses]):
        self._registered = registered

    @property
    def collection(self) -> Collection[RegisteredCourses]:
        return self._registered

    def get_all(self) -> List[RegisteredCourses]:
        return self._registered.get_all()

    def for_student(self, student_id: str) -> Optional[RegisteredCourses]:
        return self._registered.get_by_id(student_id)

    def register(self, student_id: str, course_ids: Iterable[str]) -> MutationResult[RegisteredCourses]:
        """Set the student's course list, creating the record on first registration."""

        course_ids = list(course_ids)
        with self._registered.lock:
            if self.for_student(student_id) is None:
                return self._registered.add(RegisteredCourses(student_id=student_id, course_ids=course_ids))
            return self._registered.modify(
                student_id,
                lambda current: dataclasses.replace(current, course_ids=course_ids),
                event_extra=lambda old, new: {"studentId": student_id, "courseIds": course_ids},
            )

    def unregister(self, student_id: str, course_ids: Iterable[str]) -> MutationResult[RegisteredCourses]:
        dropped = set(course_ids)
        with self._registered.lock:
            current = self._registered.read()
            if current.error is not None:
                return MutationResult.failure(ResultStatus.READ_FAILED, current.error)
            if not any(r.student_id == student_id for r in current.records):
                return MutationResult.failure(
                    ResultStatus.NOT_FOUND,
                    NotFoundError(f"No registered courses for student {student_id!r}", key=self._registered.key),
                )
            return self._registered.modify(
                student_id,
                lambda current: dataclasses.replace(
                    current, course_ids=[c for c in current.course_ids if c not in dropped]
                ),
                event_extra=lambda old, new: {
                    "studentId": student_id,
                    "courseIds": sorted(dropped),
                    "oldCourses": list(old.course_ids),
                    "newCourses": list(new.course_ids),
                },
                change_type=ChangeType.DELETE,
            )
