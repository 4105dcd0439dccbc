"""Typed property lookup on icalendar components.

``get_property_value`` is the single way normalizers read a property: a
missing property comes back as ``""`` so callers treat "absent" and "empty"
the same way.
"""
from __future__ import annotations

import datetime as _dt
from typing import Any, Optional, Union

from icalendar import vDDDTypes

__all__ = ["as_datetime", "first_property", "get_property_value"]

PropertyValue = Union[str, _dt.datetime]


def as_datetime(value: Any) -> Optional[_dt.datetime]:
    """Return a concrete datetime for a date or datetime value.

    All-day dates become midnight of that day. Other values yield None.
    """
    if isinstance(value, _dt.datetime):
        return value
    if isinstance(value, _dt.date):
        return _dt.datetime.combine(value, _dt.time())
    return None


def first_property(name: str, component: Any) -> Any:
    """Return the first property called ``name`` or None."""
    if component is None:
        return None
    prop = component.get(name)
    if isinstance(prop, list):
        return prop[0] if prop else None
    return prop


def _to_text(prop: Any) -> str:
    if isinstance(prop, str):
        return str(prop)
    to_ical = getattr(prop, "to_ical", None)
    if to_ical is not None:
        raw = to_ical()
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
    return str(prop)


def get_property_value(name: str, component: Any) -> PropertyValue:
    """Get a property value from a component, converted by its kind.

    - absent: ``""``
    - text (vText, vCalAddress and other str-based values): the literal string
    - date / date-time: a ``datetime`` (dates at midnight)
    - anything else: its iCalendar string form
    """
    prop = first_property(name, component)
    if prop is None:
        return ""
    if isinstance(prop, vDDDTypes):
        dt = as_datetime(prop.dt)
        if dt is not None:
            return dt
    return _to_text(prop)
