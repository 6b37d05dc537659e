"""Class/section normalization.

Classes arrive in many shapes (web forms, spreadsheets, mobile pickers): "5",
"fifth", "V", "Class 5", "CLASS_5". Input is permissive, output is a closed
enumeration so storage and grouping stay exact-match.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..core.enums import ClassLevel, Section
from ..core.exceptions import InvalidSelectorError

_PRE_PRIMARY = (
    (ClassLevel.PRE_NURSERY, "Pre-Nursery", ("PRE-NURSERY", "PRE_NURSERY", "PRE NURSERY", "0")),
    (ClassLevel.NURSERY, "Nursery", ("NURSERY", "0.25")),
    (ClassLevel.LKG, "LKG", ("LKG", "0.5")),
    (ClassLevel.UKG, "UKG", ("UKG", "0.75")),
)

_ORDINALS = (
    "FIRST", "SECOND", "THIRD", "FOURTH", "FIFTH", "SIXTH",
    "SEVENTH", "EIGHTH", "NINTH", "TENTH", "ELEVENTH", "TWELFTH",
)
_CARDINALS = (
    "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX",
    "SEVEN", "EIGHT", "NINE", "TEN", "ELEVEN", "TWELVE",
)
_ROMANS = ("I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII")


def _build_tables() -> tuple[Mapping[str, ClassLevel], Mapping[ClassLevel, str]]:
    lookup: dict[str, ClassLevel] = {}
    display: dict[ClassLevel, str] = {}

    for level, name, tokens in _PRE_PRIMARY:
        display[level] = name
        for token in tokens:
            lookup[token] = level

    for grade in range(1, 13):
        level = ClassLevel[f"CLASS_{grade}"]
        display[level] = f"Class {grade}"
        for token in (
            str(grade),
            _ORDINALS[grade - 1],
            _CARDINALS[grade - 1],
            _ROMANS[grade - 1],
            f"CLASS {grade}",
        ):
            lookup[token] = level

    for level in ClassLevel:
        lookup[level.value] = level
        lookup[display[level].upper()] = level

    return MappingProxyType(lookup), MappingProxyType(display)


CLASS_LOOKUP, CLASS_DISPLAY_NAMES = _build_tables()


@dataclass(frozen=True)
class ClassSectionSelector:
    class_level: ClassLevel
    section: Section

    @property
    def label(self) -> str:
        return f"{display_name(self.class_level)}-{self.section.value}"


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().upper()


def normalize_class(value: Any) -> Optional[ClassLevel]:
    if isinstance(value, ClassLevel):
        return value
    return CLASS_LOOKUP.get(_clean(value))


def normalize_section(value: Any) -> Optional[Section]:
    if isinstance(value, Section):
        return value
    try:
        return Section(_clean(value))
    except ValueError:
        return None


def display_name(level: ClassLevel) -> str:
    return CLASS_DISPLAY_NAMES[level]


def resolve_selector(class_name: Any, section: Any) -> ClassSectionSelector:
    class_level = normalize_class(class_name)
    section_enum = normalize_section(section)
    if class_level is None or section_enum is None:
        raise InvalidSelectorError("Invalid class or section")
    return ClassSectionSelector(class_level=class_level, section=section_enum)
