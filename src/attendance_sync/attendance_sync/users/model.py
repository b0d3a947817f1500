from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object; role-specific attributes are optional. ``department``
    holds a Department *name* and ``section`` a Section *code*, not ids.
    """

    id: str
    name: str
    email: str
    password: str
    role: Role
    phone: Optional[str] = None
    subject: Optional[str] = None
    assigned_class: Optional[str] = None
    roll_no: Optional[str] = None
    course: Optional[str] = None
    department: Optional[str] = None
    section: Optional[str] = None
    emp_id: Optional[str] = None
