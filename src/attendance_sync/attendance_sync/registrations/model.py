from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class CourseRegistration:
    """Registration window for one department and term."""

    id: str
    semester: str
    year: str
    department_id: str
    is_open: bool
    deadline: Optional[str] = None


@dataclass(frozen=True)
class RegisteredCourses:
    """A student's registered MasterSubject ids. One record per student."""

    student_id: str
    course_ids: List[str] = field(default_factory=list)
