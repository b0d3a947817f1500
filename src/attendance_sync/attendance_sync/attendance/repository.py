from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..common.codec import dumps, loads, record_from_dict, record_to_dict
from ..common.datetime_utils import epoch_millis, iso_timestamp, plus_minutes_millis
from ..core.constants import DEFAULT_LIVE_CODE_TTL_MINUTES
from ..core.enums import AttendanceStatus, ChangeType, EntityType, ResultStatus
from ..core.exceptions import NotFoundError, StorageWriteError, StoreError
from ..core.results import MutationResult
from ..storage.persister import Persister
from ..store.collection import Actor, Collection
from ..sync.events import ChangeEvent
from ..sync.fabric import BroadcastFabric
from .model import Attendance, LiveAttendanceCode

logger = logging.getLogger(__name__)


class AttendanceRepository:
    """Typed accessors for attendance marks.

    Uniqueness of (student, date, subject) is not checked here; see
    ``AttendanceService.mark``.
    """

    def __init__(self, records: Collection[Attendance], *, actor: Actor, clock: Callable[[], datetime]):
        self._records = records
        self._actor = actor
        self._clock = clock

    @property
    def collection(self) -> Collection[Attendance]:
        return self._records

    def get_all(self) -> List[Attendance]:
        return self._records.get_all()

    def get_by_id(self, attendance_id: str) -> Optional[Attendance]:
        return self._records.get_by_id(attendance_id)

    def for_student(self, student_id: str) -> List[Attendance]:
        return self._records.filter(lambda a: a.student_id == student_id)

    def for_subject(self, subject_id: str) -> List[Attendance]:
        return self._records.filter(lambda a: a.subject_id == subject_id)

    def by_department(self, department_id: str) -> List[Attendance]:
        return self._records.filter(lambda a: a.department_id == department_id)

    def by_section(self, section_id: str) -> List[Attendance]:
        return self._records.filter(lambda a: a.section_id == section_id)

    def by_department_and_date(self, department_id: str, day: str) -> List[Attendance]:
        return self._records.filter(lambda a: a.department_id == department_id and a.date == day)

    def find(self, *, student_id: str, day: str, subject_id: str) -> Optional[Attendance]:
        return next(
            (a for a in self.get_all() if a.student_id == student_id and a.date == day and a.subject_id == subject_id),
            None,
        )

    def add(self, record: Attendance) -> MutationResult[Attendance]:
        """Append a mark, filling ``marked_by`` (acting user) and ``marked_at`` (now) when absent."""

        user_id, _role = self._actor()
        enriched = dataclasses.replace(
            record,
            marked_by=record.marked_by or user_id,
            marked_at=record.marked_at or iso_timestamp(self._clock()),
        )
        return self._records.add(enriched)

    def update_status(self, attendance_id: str, status: AttendanceStatus) -> MutationResult[Attendance]:
        status = AttendanceStatus(status)
        marked_at = iso_timestamp(self._clock())
        return self._records.modify(
            attendance_id,
            lambda current: dataclasses.replace(current, status=status, marked_at=marked_at),
            event_extra=lambda old, new: {"oldStatus": old.status.value, "newStatus": new.status.value},
        )

    def update(self, attendance_id: str, *, expected: Optional[Attendance] = None, **changes) -> MutationResult[Attendance]:
        return self._records.update(attendance_id, changes, expected=expected)

    def delete(self, attendance_id: str) -> MutationResult[Attendance]:
        return self._records.delete(attendance_id)


class LiveAttendanceCodeRepository:
    """Singleton live session. Expiry is checked lazily on read; nothing evicts it."""

    def __init__(
        self,
        *,
        key: str,
        persister: Persister,
        fabric: BroadcastFabric,
        actor: Actor,
        clock: Callable[[], datetime],
    ):
        self._key = key
        self._persister = persister
        self._fabric = fabric
        self._actor = actor
        self._clock = clock

    def set(
        self,
        code: str,
        subject_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        *,
        ttl_minutes: int = DEFAULT_LIVE_CODE_TTL_MINUTES,
    ) -> MutationResult[LiveAttendanceCode]:
        now = self._clock()
        session = LiveAttendanceCode(
            code=str(code),
            subject_id=subject_id or "",
            teacher_id=teacher_id or "",
            timestamp=epoch_millis(now),
            expires_at=plus_minutes_millis(now, ttl_minutes),
        )
        try:
            self._persister.write(self._key, dumps(record_to_dict(session)))
        except StorageWriteError as e:
            logger.error(f"Failed to save {self._key}: {e}")
            return MutationResult.failure(ResultStatus.WRITE_FAILED, e)

        event = self._event(ChangeType.ADD, record_to_dict(session), user_id=teacher_id or None)
        self._persister.when_written(self._key, lambda: self._deliver(event))
        return MutationResult.success(session)

    def get(self) -> Optional[LiveAttendanceCode]:
        """Active session, or None when absent, unreadable or past ``expires_at``."""

        session = self.get_raw()
        if session is None or session.is_expired(epoch_millis(self._clock())):
            return None
        return session

    def get_raw(self) -> Optional[LiveAttendanceCode]:
        try:
            text = self._persister.read(self._key)
            if text is None:
                return None
            return record_from_dict(LiveAttendanceCode, loads(text, key=self._key))
        except StoreError as e:
            logger.warning(f"Ignoring unreadable live attendance session: {e}")
            return None

    def clear(self) -> MutationResult[LiveAttendanceCode]:
        session = self.get_raw()
        if session is None:
            return MutationResult.failure(
                ResultStatus.NOT_FOUND, NotFoundError("No live attendance session", key=self._key)
            )
        try:
            self._persister.remove(self._key)
        except StorageWriteError as e:
            logger.error(f"Failed to remove {self._key}: {e}")
            return MutationResult.failure(ResultStatus.WRITE_FAILED, e, previous=session)

        self._deliver(self._event(ChangeType.DELETE, record_to_dict(session)))
        return MutationResult.success(session, previous=session)

    def _event(self, change_type: ChangeType, data, *, user_id: Optional[str] = None) -> ChangeEvent:
        actor_id, role = self._actor()
        return ChangeEvent(
            type=change_type,
            entity_type=EntityType.LIVE_ATTENDANCE_CODE,
            data=data,
            timestamp=epoch_millis(self._clock()),
            user_id=user_id or actor_id,
            source=role,
        )

    def _deliver(self, event: ChangeEvent) -> None:
        if not self._fabric.is_open:
            return
        self._fabric.publish(EntityType.LIVE_ATTENDANCE_CODE, event)
