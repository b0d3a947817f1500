from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimetableSlot:
    """One weekly slot. ``time`` is "HH:MM-HH:MM", ``day`` a weekday name.

    Overlapping slots for the same teacher are allowed.
    """

    id: str
    time: str
    subject_id: str
    teacher_id: str
    class_name: str
    day: str
    room: Optional[str] = None
    section: Optional[str] = None
