from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subject:
    """A subject as taught by one teacher to one class."""

    id: str
    name: str
    code: str
    teacher_id: str
    class_name: str
