from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Department:
    id: str
    name: str
    code: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    code: str
    department_id: str
    description: Optional[str] = None


@dataclass(frozen=True)
class MasterSubject:
    """Catalog entry for a subject, as opposed to a teacher's Subject instance."""

    id: str
    name: str
    code: str
    department_id: str
    description: Optional[str] = None
