from __future__ import annotations

from typing import List, Optional

from ..core.results import MutationResult
from ..store.collection import Collection
from .model import Announcement


class AnnouncementRepository:
    def __init__(self, announcements: Collection[Announcement]):
        self._announcements = announcements

    @property
    def collection(self) -> Collection[Announcement]:
        return self._announcements

    def get_all(self) -> List[Announcement]:
        return self._announcements.get_all()

    def get_by_id(self, announcement_id: str) -> Optional[Announcement]:
        return self._announcements.get_by_id(announcement_id)

    def for_teacher(self, teacher_id: str) -> List[Announcement]:
        return self._announcements.filter(lambda a: a.teacher_id == teacher_id)

    def for_students(self) -> List[Announcement]:
        # Every student sees every announcement.
        return self.get_all()

    def add(self, announcement: Announcement) -> MutationResult[Announcement]:
        return self._announcements.add(announcement)

    def update(
        self, announcement_id: str, *, expected: Optional[Announcement] = None, **changes
    ) -> MutationResult[Announcement]:
        return self._announcements.update(announcement_id, changes, expected=expected)

    def delete(self, announcement_id: str) -> MutationResult[Announcement]:
        return self._announcements.delete(announcement_id)
