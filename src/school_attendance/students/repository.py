from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..classes.normalization import ClassSectionSelector
from .model import Student


class StudentRepository(Protocol):
    """Roster lookups used by the attendance core.

    Read-only: attendance never mutates student rows.
    """

    def list_active_by_class(self, selector: ClassSectionSelector) -> Sequence[Student]:
        """Active students of a class+section, ordered by roll number."""

        raise NotImplementedError

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError
