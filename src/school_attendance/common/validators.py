from __future__ import annotations

from typing import Any

from ..core.enums import Session
from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_session(value: Any) -> Session:
    if isinstance(value, Session):
        return value
    try:
        return Session(value)
    except ValueError:
        raise ValidationError('Invalid session. Must be "morning" or "afternoon"')


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
