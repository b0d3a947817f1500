from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role. Advisory only: the store never enforces it."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HOLIDAY = "holiday"


class ChangeType(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class EntityType(str, Enum):
    """Entity tags. Each tag owns exactly one broadcast channel."""

    USER = "user"
    ATTENDANCE = "attendance"
    SUBJECT = "subject"
    ANNOUNCEMENT = "announcement"
    TIMETABLE = "timetable"
    DEPARTMENT = "department"
    SECTION = "section"
    MASTER_SUBJECT = "masterSubject"
    COURSE_REGISTRATION = "course-registration"
    REGISTERED_COURSE = "registeredCourse"
    LIVE_ATTENDANCE_CODE = "liveAttendanceCode"


class FlushPolicy(str, Enum):
    """How the persister hands collection blobs to the storage backend."""

    IMMEDIATE = "immediate"
    DEBOUNCED = "debounced"


class ResultStatus(str, Enum):
    OK = "OK"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    WRITE_FAILED = "WRITE_FAILED"
    READ_FAILED = "READ_FAILED"
