from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from werkzeug.security import generate_password_hash

from ..catalog.model import Department, MasterSubject, Section
from ..core.enums import Role
from ..subjects.model import Subject
from ..users.model import User

if TYPE_CHECKING:
    from .store import AttendanceStore

logger = logging.getLogger(__name__)

# (id, name, email, password, role, extra attributes)
DEMO_USERS = [
    ("admin1", "Admin User", "aman@aams.com", "aman@aams", Role.ADMIN, {"phone": "9876543210"}),
    (
        "teacher1",
        "Dr. John Smith",
        "john@aams.com",
        "teacher123",
        Role.TEACHER,
        {"phone": "9876543211", "subject": "Mathematics", "assigned_class": "B.Tech CSE - A"},
    ),
    (
        "teacher2",
        "Prof. Sarah Johnson",
        "sarah@aams.com",
        "teacher123",
        Role.TEACHER,
        {"phone": "9876543212", "subject": "Physics", "assigned_class": "B.Tech CSE - B"},
    ),
    (
        "student1",
        "Rajesh Kumar",
        "rajesh@aams.com",
        "student123",
        Role.STUDENT,
        {
            "phone": "9876543213",
            "roll_no": "CSE001",
            "course": "B.Tech CSE - A",
            "department": "Computer Science & Engineering",
            "section": "A",
        },
    ),
    (
        "student2",
        "Priya Sharma",
        "priya@aams.com",
        "student123",
        Role.STUDENT,
        {
            "phone": "9876543214",
            "roll_no": "CSE002",
            "course": "B.Tech CSE - B",
            "department": "Computer Science & Engineering",
            "section": "B",
        },
    ),
    (
        "student3",
        "Amit Patel",
        "amit@aams.com",
        "student123",
        Role.STUDENT,
        {
            "phone": "9876543215",
            "roll_no": "CSE003",
            "course": "B.Tech CSE - A",
            "department": "Computer Science & Engineering",
            "section": "A",
        },
    ),
]

DEMO_SUBJECTS = [
    Subject(id="sub1", name="Mathematics", code="CS101", teacher_id="teacher1", class_name="B.Tech CSE - A"),
    Subject(id="sub2", name="Physics", code="CS102", teacher_id="teacher2", class_name="B.Tech CSE - B"),
]

DEMO_DEPARTMENTS = [
    Department(
        id="dept1",
        name="Computer Science & Engineering",
        code="CSE",
        description="Department of Computer Science and Engineering",
    ),
    Department(
        id="dept2",
        name="Electrical & Electronics Engineering",
        code="EEE",
        description="Department of Electrical and Electronics Engineering",
    ),
]

DEMO_SECTIONS = [
    Section(id="sec1", name="Section A", code="A", department_id="dept1", description="First section of CSE department"),
    Section(id="sec2", name="Section B", code="B", department_id="dept1", description="Second section of CSE department"),
]

DEMO_MASTER_SUBJECTS = [
    MasterSubject(id="msub1", name="Mathematics", code="CS101", department_id="dept1", description="Basic Mathematics for Engineering"),
    MasterSubject(id="msub2", name="Physics", code="CS102", department_id="dept1", description="Engineering Physics"),
    MasterSubject(id="msub3", name="Chemistry", code="CS103", department_id="dept1", description="Engineering Chemistry"),
]


def hash_password(password: str, *, method: Optional[str] = None) -> str:
    if method:
        return generate_password_hash(password, method=method)
    return generate_password_hash(password)


def demo_users(*, password_method: Optional[str] = None) -> list[User]:
    return [
        User(id=uid, name=name, email=email, password=hash_password(pw, method=password_method), role=role, **extra)
        for uid, name, email, pw, role, extra in DEMO_USERS
    ]


def initialize_storage(store: "AttendanceStore", *, password_method: Optional[str] = None) -> bool:
    """Seed every collection once per fresh storage.

    Only runs when the users key is absent. Writes are immediate and not
    broadcast. There is no migration path for older seed data.
    """

    if store.is_initialized():
        return False

    store.subjects.collection.replace_all(list(DEMO_SUBJECTS), immediate=True)
    store.attendance.collection.replace_all([], immediate=True)
    store.announcements.collection.replace_all([], immediate=True)
    store.timetable.collection.replace_all([], immediate=True)
    store.departments.collection.replace_all(list(DEMO_DEPARTMENTS), immediate=True)
    store.sections.collection.replace_all(list(DEMO_SECTIONS), immediate=True)
    store.master_subjects.collection.replace_all(list(DEMO_MASTER_SUBJECTS), immediate=True)
    store.course_registrations.collection.replace_all([], immediate=True)
    store.registered_courses.collection.replace_all([], immediate=True)
    # Users last: the users key marks the storage as seeded.
    store.users.collection.replace_all(demo_users(password_method=password_method), immediate=True)

    logger.info("Demo data seeded")
    return True
