"""Attendee property normalization."""
from __future__ import annotations

from typing import Any, Optional, Tuple

from .model import AttendeeRecord

__all__ = ["normalize_attendee", "normalize_attendees"]


def _param(params: Any, name: str) -> Optional[str]:
    if not params:
        return None
    value = params.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        if value is None:
            return None
    return str(value)


def normalize_attendee(raw: Any, author_name: Optional[str], author_email: Optional[str]) -> AttendeeRecord:
    """Build an AttendeeRecord from an ATTENDEE property.

    ``is_me`` uses exact, case-sensitive equality of CN against the configured
    author name or email. "Fred Flintstone" does not match "fred flintstone".
    """
    params = getattr(raw, "params", None)
    cn = _param(params, "CN")
    address = str(raw) if raw is not None and str(raw) else None
    is_me = bool(cn) and (cn == author_name or cn == author_email)
    return AttendeeRecord(
        category=_param(params, "CUTYPE"),
        role=_param(params, "ROLE"),
        status=_param(params, "PARTSTAT"),
        common_name=cn,
        guest_count=_param(params, "X-NUM-GUESTS"),
        address=address,
        is_me=is_me,
    )


def normalize_attendees(
    component: Any, author_name: Optional[str], author_email: Optional[str]
) -> Tuple[AttendeeRecord, ...]:
    """Normalize every ATTENDEE of a component, keeping source order."""
    if component is None:
        return ()
    raw = component.get("ATTENDEE")
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raw = [raw]
    return tuple(normalize_attendee(a, author_name, author_email) for a in raw)
