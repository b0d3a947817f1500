from __future__ import annotations

from typing import List, Optional

from ..catalog.repository import DepartmentRepository, SectionRepository
from ..core.enums import Role
from ..core.results import MutationResult
from ..store.collection import Collection
from .model import User


class UserRepository:
    """Typed accessors for the users collection."""

    def __init__(self, users: Collection[User], departments: DepartmentRepository, sections: SectionRepository):
        self._users = users
        self._departments = departments
        self._sections = sections

    @property
    def collection(self) -> Collection[User]:
        return self._users

    def get_all(self) -> List[User]:
        return self._users.get_all()

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((u for u in self._users.get_all() if u.email.lower() == wanted), None)

    def students(self) -> List[User]:
        return self._users.filter(lambda u: u.role == Role.STUDENT)

    def teachers(self) -> List[User]:
        return self._users.filter(lambda u: u.role == Role.TEACHER)

    def students_by_department(self, department_id: str) -> List[User]:
        department = self._departments.get_by_id(department_id)
        if not department:
            return []
        return [s for s in self.students() if s.department == department.name]

    def students_by_section(self, section_id: str) -> List[User]:
        section = self._sections.get_by_id(section_id)
        if not section:
            return []
        return [s for s in self.students() if s.section == section.code]

    def students_for_teacher(self, teacher_id: str) -> List[User]:
        # Teachers see every student; there is no enrolment link to narrow by.
        return self.students()

    def add(self, user: User) -> MutationResult[User]:
        return self._users.add(user)

    def update(self, user_id: str, *, expected: Optional[User] = None, **changes) -> MutationResult[User]:
        return self._users.update(user_id, changes, expected=expected)

    def delete(self, user_id: str) -> MutationResult[User]:
        return self._users.delete(user_id)
