from __future__ import annotations

from typing import List, Optional

from ..core.results import MutationResult
from ..store.collection import Collection
from .model import Subject


class SubjectRepository:
    def __init__(self, subjects: Collection[Subject]):
        self._subjects = subjects

    @property
    def collection(self) -> Collection[Subject]:
        return self._subjects

    def get_all(self) -> List[Subject]:
        return self._subjects.get_all()

    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        return self._subjects.get_by_id(subject_id)

    def for_teacher(self, teacher_id: str) -> List[Subject]:
        return self._subjects.filter(lambda s: s.teacher_id == teacher_id)

    def add(self, subject: Subject) -> MutationResult[Subject]:
        return self._subjects.add(subject)

    def update(self, subject_id: str, *, expected: Optional[Subject] = None, **changes) -> MutationResult[Subject]:
        return self._subjects.update(subject_id, changes, expected=expected)

    def delete(self, subject_id: str) -> MutationResult[Subject]:
        return self._subjects.delete(subject_id)
