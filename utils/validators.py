"""
Field-level validators shared by the request schemas.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


def validate_choice(value: Any, enum_cls: Type[E], label: str) -> E:
    """
    Coerce *value* to a member of *enum_cls*.

    Raises ``ValueError("Invalid <label>. Must be: A, B, ...")`` for
    anything outside the enumerated set, including ``None``.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {label}. Must be: {allowed}") from None


def parse_due_date(value: Any) -> Optional[datetime]:
    """
    Parse a due date given as an ISO date or datetime string.

    Empty strings and ``None`` mean "no due date".  Naive values are taken
    as UTC and everything is normalised to UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError("Invalid dueDate") from None
    else:
        raise ValueError("Invalid dueDate")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends that drop tzinfo."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Turn pydantic error dicts into one short client-facing message."""
    if not errors:
        return "Invalid request"
    err = errors[0]
    err_type = err.get("type", "")
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]

    if err_type == "json_invalid":
        return "Invalid JSON body"
    if err_type == "missing":
        if not loc:
            return "Request body is required"
        field = loc[-1]
        return f"{field[:1].upper()}{field[1:]} is required"

    msg = err.get("msg", "Invalid request")
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    return f"{loc[-1]}: {msg}" if loc else msg
