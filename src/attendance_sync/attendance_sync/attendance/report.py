from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..core.constants import LOW_ATTENDANCE_THRESHOLD
from ..core.enums import AttendanceStatus
from ..store.store import AttendanceStore
from .model import Attendance


@dataclass(frozen=True)
class AttendanceSummary:
    """Counts for one (student or subject) group. Holidays do not count toward the total."""

    key: str
    label: str
    present: int
    late: int
    absent: int
    holiday: int

    @property
    def total(self) -> int:
        return self.present + self.late + self.absent

    @property
    def attended(self) -> int:
        return self.present + self.late

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.attended * 100.0 / self.total, 1)


def _summarize(records: Iterable[Attendance], key_of, label_of) -> List[AttendanceSummary]:
    counts: Dict[str, Dict[AttendanceStatus, int]] = {}
    for r in records:
        bucket = counts.setdefault(key_of(r), {s: 0 for s in AttendanceStatus})
        bucket[r.status] += 1

    return [
        AttendanceSummary(
            key=key,
            label=label_of(key),
            present=c[AttendanceStatus.PRESENT],
            late=c[AttendanceStatus.LATE],
            absent=c[AttendanceStatus.ABSENT],
            holiday=c[AttendanceStatus.HOLIDAY],
        )
        for key, c in counts.items()
    ]


class AttendanceReportService:
    def __init__(self, store: AttendanceStore):
        self._store = store

    def student_summary(self, student_id: str) -> List[AttendanceSummary]:
        """Per-subject attendance for one student, ordered by subject name."""

        subjects = {s.id: s.name for s in self._store.subjects.get_all()}
        rows = _summarize(
            self._store.attendance.for_student(student_id),
            key_of=lambda r: r.subject_id,
            label_of=lambda key: subjects.get(key, key),
        )
        rows.sort(key=lambda s: s.label)
        return rows

    def subject_summary(self, subject_id: str) -> List[AttendanceSummary]:
        """Per-student attendance for one subject, lowest percentage first."""

        names = {u.id: u.name for u in self._store.users.students()}
        rows = _summarize(
            self._store.attendance.for_subject(subject_id),
            key_of=lambda r: r.student_id,
            label_of=lambda key: names.get(key, key),
        )
        rows.sort(key=lambda s: (s.percentage, s.label))
        return rows

    def low_attendance_subjects(self, student_id: str, *, threshold: float = LOW_ATTENDANCE_THRESHOLD) -> List[AttendanceSummary]:
        return [s for s in self.student_summary(student_id) if s.total and s.percentage < threshold]
