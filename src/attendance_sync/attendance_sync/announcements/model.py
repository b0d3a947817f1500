from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Announcement:
    """Domain entity: a teacher's announcement.

    Note: ``teacher_name``, ``teacher_subject`` and ``teacher_department`` are a
    snapshot of the teacher's profile taken when the announcement is posted.
    They are not refreshed when the profile changes later.
    """

    id: str
    title: str
    content: str
    teacher_id: str
    date: str
    teacher_name: Optional[str] = None
    teacher_subject: Optional[str] = None
    teacher_department: Optional[str] = None
