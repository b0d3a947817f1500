"""Store facade: every typed repository of one context, plus the session keys.

One ``AttendanceStore`` per context (simulated tab). Contexts that share a
storage backend and a broadcast hub see each other's writes and events.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Tuple

from ..announcements.model import Announcement
from ..announcements.repository import AnnouncementRepository
from ..attendance.model import Attendance
from ..attendance.repository import AttendanceRepository, LiveAttendanceCodeRepository
from ..catalog.model import Department, MasterSubject, Section
from ..catalog.repository import DepartmentRepository, MasterSubjectRepository, SectionRepository
from ..common.datetime_utils import epoch_millis, now_local
from ..core import constants as keys
from ..core.constants import DEFAULT_LIVE_CODE_TTL_MINUTES
from ..core.enums import EntityType, Role
from ..core.exceptions import StorageWriteError
from ..registrations.model import CourseRegistration, RegisteredCourses
from ..registrations.repository import CourseRegistrationRepository, RegisteredCoursesRepository
from ..storage.persister import Persister
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from ..sync.fabric import BroadcastFabric
from ..timetable.model import TimetableSlot
from ..timetable.repository import TimetableRepository
from ..users.model import User
from ..users.repository import UserRepository
from .collection import Collection

logger = logging.getLogger(__name__)


class AttendanceStore:
    def __init__(
        self,
        persister: Persister,
        fabric: BroadcastFabric,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        live_code_ttl_minutes: int = DEFAULT_LIVE_CODE_TTL_MINUTES,
        password_hash_method: Optional[str] = None,
    ):
        self.persister = persister
        self.fabric = fabric
        self.clock = clock or now_local
        self.live_code_ttl_minutes = int(live_code_ttl_minutes)
        self.password_hash_method = password_hash_method
        self._lock = threading.RLock()

        self.departments = DepartmentRepository(self._collection(keys.DEPARTMENTS_KEY, EntityType.DEPARTMENT, Department))
        self.sections = SectionRepository(self._collection(keys.SECTIONS_KEY, EntityType.SECTION, Section))
        self.master_subjects = MasterSubjectRepository(
            self._collection(keys.MASTER_SUBJECTS_KEY, EntityType.MASTER_SUBJECT, MasterSubject)
        )
        self.users = UserRepository(
            self._collection(keys.USERS_KEY, EntityType.USER, User), self.departments, self.sections
        )
        self.attendance = AttendanceRepository(
            self._collection(keys.ATTENDANCE_KEY, EntityType.ATTENDANCE, Attendance),
            actor=self.actor,
            clock=self.clock,
        )
        self.subjects = SubjectRepository(self._collection(keys.SUBJECTS_KEY, EntityType.SUBJECT, Subject))
        self.announcements = AnnouncementRepository(
            self._collection(keys.ANNOUNCEMENTS_KEY, EntityType.ANNOUNCEMENT, Announcement)
        )
        self.timetable = TimetableRepository(self._collection(keys.TIMETABLE_KEY, EntityType.TIMETABLE, TimetableSlot))
        self.course_registrations = CourseRegistrationRepository(
            self._collection(keys.COURSE_REGISTRATIONS_KEY, EntityType.COURSE_REGISTRATION, CourseRegistration)
        )
        self.registered_courses = RegisteredCoursesRepository(
            self._collection(
                keys.REGISTERED_COURSES_KEY, EntityType.REGISTERED_COURSE, RegisteredCourses, id_attr="student_id"
            )
        )
        self.live_code = LiveAttendanceCodeRepository(
            key=keys.LIVE_ATTENDANCE_CODE_KEY,
            persister=persister,
            fabric=fabric,
            actor=self.actor,
            clock=self.clock,
        )

    def _collection(self, key: str, entity_type: EntityType, record_type, *, id_attr: str = "id") -> Collection:
        return Collection(
            key=key,
            entity_type=entity_type,
            record_type=record_type,
            persister=self.persister,
            fabric=self.fabric,
            clock=self.clock,
            actor=self.actor,
            lock=self._lock,
            id_attr=id_attr,
        )

    # ---- lifecycle ---------------------------------------------------------

    def open(self) -> "AttendanceStore":
        self.fabric.open()
        return self

    def close(self) -> None:
        errors = self.persister.close()
        for error in errors:
            logger.error(f"Unsaved data on close: {error}")
        self.fabric.close()

    def __enter__(self) -> "AttendanceStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def is_initialized(self) -> bool:
        return self.persister.read(keys.USERS_KEY) is not None

    def initialize(self) -> bool:
        """Seed demo data into fresh storage. Returns False when already seeded."""

        from .bootstrap import initialize_storage

        return initialize_storage(self, password_method=self.password_hash_method)

    # ---- session -----------------------------------------------------------

    def current_user_id(self) -> Optional[str]:
        return self.persister.read(keys.CURRENT_USER_KEY) or None

    def current_user(self) -> Optional[User]:
        user_id = self.current_user_id()
        if not user_id:
            return None
        if not self.is_initialized():
            self.initialize()
        return self.users.get_by_id(user_id)

    def start_session(self, user_id: str) -> None:
        # Session keys are per-profile bookkeeping and never broadcast.
        self.persister.write(keys.CURRENT_USER_KEY, user_id, immediate=True)
        self.persister.write(keys.SESSION_TIMESTAMP_KEY, str(epoch_millis(self.clock())), immediate=True)
        self.persister.write(keys.SESSION_ACTIVE_KEY, "true", immediate=True)

    def end_session(self) -> bool:
        """Clear the session keys. Returns False when the backend refused a removal."""

        ok = True
        for key in (keys.CURRENT_USER_KEY, keys.SESSION_TIMESTAMP_KEY, keys.SESSION_ACTIVE_KEY):
            try:
                self.persister.remove(key)
            except StorageWriteError as e:
                logger.error(f"Failed to clear session key {key}: {e}")
                ok = False
        return ok

    def actor(self) -> Tuple[Optional[str], Optional[Role]]:
        """Acting user's id and role, recorded on every change event."""

        user_id = self.current_user_id()
        if not user_id:
            return None, None
        user = self.users.get_by_id(user_id)
        return user_id, user.role if user else None
