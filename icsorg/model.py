"""Normalized calendar records.

Everything the renderer needs is flattened into frozen dataclasses here.
Optional members are ``None`` when the source has no value, so rendering can
apply one explicit "omit if absent" rule per field.
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .constants import DEFAULT_TITLE

_SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Duration:
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @classmethod
    def from_timedelta(cls, delta: _dt.timedelta) -> Optional["Duration"]:
        """Split a timedelta the way iCalendar durations are normalized.

        Whole days that are an exact multiple of a week are expressed as weeks
        with no days; any other day count is kept as days with no weeks.
        Returns None for zero-length (or negative) deltas.
        """
        secs = int(delta.total_seconds())
        if secs <= 0:
            return None
        days, secs = divmod(secs, _SECONDS_PER_DAY)
        weeks = 0
        if days and days % 7 == 0:
            weeks, days = days // 7, 0
        hours, secs = divmod(secs, 3600)
        minutes, secs = divmod(secs, 60)
        return cls(weeks=weeks, days=days, hours=hours, minutes=minutes, seconds=secs)


@dataclass(frozen=True)
class AttendeeRecord:
    category: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    common_name: Optional[str] = None
    guest_count: Optional[str] = None
    address: Optional[str] = None
    is_me: bool = False

    @property
    def label(self) -> Optional[str]:
        """Name shown for the attendee: CN, falling back to the address."""
        return self.common_name or self.address


@dataclass(frozen=True)
class NormalizedEvent:
    uid: str
    start: _dt.datetime
    end: _dt.datetime
    summary: str = ""
    description: str = ""
    location: str = ""
    organizer: Optional[str] = None
    status: Optional[str] = None
    last_modified: Optional[_dt.datetime] = None
    duration: Optional[Duration] = None
    attendees: Tuple[AttendeeRecord, ...] = ()
    recurrence_id: Optional[_dt.datetime] = None

    @property
    def is_override(self) -> bool:
        return self.recurrence_id is not None


@dataclass(frozen=True)
class Occurrence:
    """One concrete instance of a recurring series inside the window.

    ``item`` is the component fields are read from: the override component
    when this instance was modified, otherwise the series master.
    """
    start: _dt.datetime
    end: _dt.datetime
    item: Any
    recurrence_id: Optional[_dt.datetime] = None


@dataclass(frozen=True)
class ExpandedWindow:
    events: Tuple[Any, ...] = ()
    occurrences: Tuple[Occurrence, ...] = ()


@dataclass(frozen=True)
class Identity:
    """Who "me" is when matching attendees."""
    author_name: Optional[str] = None
    author_email: Optional[str] = None


@dataclass(frozen=True)
class HeaderFields:
    title: str = DEFAULT_TITLE
    author: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    startup: Optional[str] = None
    filetags: Optional[str] = None
