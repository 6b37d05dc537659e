from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ClassLevel, Section


@dataclass(frozen=True)
class Student:
    """Roster entry.

    Owned by the student records module; attendance only holds its id.
    """

    student_id: str
    roll_no: int
    first_name: str
    last_name: str
    class_level: ClassLevel
    section: Section
    admission_no: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
