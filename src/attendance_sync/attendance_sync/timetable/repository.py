from __future__ import annotations

from typing import List, Optional

from ..core.results import MutationResult
from ..store.collection import Collection
from ..users.model import User
from .model import TimetableSlot


class TimetableRepository:
    def __init__(self, slots: Collection[TimetableSlot]):
        self._slots = slots

    @property
    def collection(self) -> Collection[TimetableSlot]:
        return self._slots

    def get_all(self) -> List[TimetableSlot]:
        return self._slots.get_all()

    def get_by_id(self, slot_id: str) -> Optional[TimetableSlot]:
        return self._slots.get_by_id(slot_id)

    def for_teacher(self, teacher_id: str) -> List[TimetableSlot]:
        return self._slots.filter(lambda s: s.teacher_id == teacher_id)

    def for_student(self, student: User) -> List[TimetableSlot]:
        """Slots whose class matches the student's course."""

        return self._slots.filter(lambda s: s.class_name == student.course)

    def add(self, slot: TimetableSlot) -> MutationResult[TimetableSlot]:
        return self._slots.add(slot)

    def update(self, slot_id: str, *, expected: Optional[TimetableSlot] = None, **changes) -> MutationResult[TimetableSlot]:
        return self._slots.update(slot_id, changes, expected=expected)

    def delete(self, slot_id: str) -> MutationResult[TimetableSlot]:
        return self._slots.delete(slot_id)
