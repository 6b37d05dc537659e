from __future__ import annotations

from enum import Enum
from typing import Optional


class Session(str, Enum):
    """One of the two daily attendance slots."""

    MORNING = "morning"
    AFTERNOON = "afternoon"


class Mark(str, Enum):
    """Tri-state session flag: present, absent, or never marked."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    UNMARKED = "UNMARKED"

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> "Mark":
        if flag is None:
            return cls.UNMARKED
        return cls.PRESENT if flag else cls.ABSENT

    def as_flag(self) -> Optional[bool]:
        if self is Mark.UNMARKED:
            return None
        return self is Mark.PRESENT

    @property
    def is_marked(self) -> bool:
        return self is not Mark.UNMARKED


class DayStatus(str, Enum):
    """Full-day status derived from the two session marks."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    HALF_DAY = "HALF_DAY"
    NOT_MARKED = "NOT_MARKED"


class ClassLevel(str, Enum):
    """Grade levels, ordered from pre-primary to grade 12."""

    PRE_NURSERY = "PRE_NURSERY"
    NURSERY = "NURSERY"
    LKG = "LKG"
    UKG = "UKG"
    CLASS_1 = "CLASS_1"
    CLASS_2 = "CLASS_2"
    CLASS_3 = "CLASS_3"
    CLASS_4 = "CLASS_4"
    CLASS_5 = "CLASS_5"
    CLASS_6 = "CLASS_6"
    CLASS_7 = "CLASS_7"
    CLASS_8 = "CLASS_8"
    CLASS_9 = "CLASS_9"
    CLASS_10 = "CLASS_10"
    CLASS_11 = "CLASS_11"
    CLASS_12 = "CLASS_12"


class Section(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
