"""Build NormalizedEvent records from expanded calendar components.

Master events and occurrence instances go through the same field mapping.
Fields are always read from the instance's own component (the override when
one exists), never merged with the series master.
"""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, Optional, Tuple

from .attendees import normalize_attendees
from .fields import as_datetime, first_property, get_property_value
from .model import Duration, Identity, NormalizedEvent, Occurrence

LOG = logging.getLogger(__name__)

__all__ = ["EventNormalizer", "normalize_event", "normalize_occurrence"]


def _text(name: str, component: Any) -> str:
    value = get_property_value(name, component)
    return value if isinstance(value, str) else str(value)


def _optional_text(name: str, component: Any) -> Optional[str]:
    return _text(name, component) or None


def _decoded_dt(name: str, component: Any) -> Optional[_dt.datetime]:
    prop = first_property(name, component)
    return as_datetime(getattr(prop, "dt", None))


def component_span(component: Any) -> Tuple[_dt.datetime, _dt.datetime]:
    """Resolve start/end of a single (non-expanded) VEVENT.

    End falls back to DURATION, then to one day for all-day events and to the
    start itself for timed events.
    """
    start_prop = first_property("DTSTART", component)
    start = as_datetime(getattr(start_prop, "dt", None))
    if start is None:
        raise ValueError(f"Event {_text('UID', component)!r} has no DTSTART")
    end = _decoded_dt("DTEND", component)
    if end is None:
        dur = getattr(first_property("DURATION", component), "dt", None)
        if isinstance(dur, _dt.timedelta):
            end = start + dur
        elif not isinstance(start_prop.dt, _dt.datetime):
            end = start + _dt.timedelta(days=1)
        else:
            end = start
    return start, end


class EventNormalizer:
    """Map calendar components to NormalizedEvent.

    ``identity`` decides which attendee is "me". ``tz`` is the zone that
    aware timestamps are shown in (local zone when None); results are naive
    wall-clock datetimes so masters and occurrences compare cleanly.
    """

    def __init__(self, identity: Optional[Identity] = None, tz: Optional[_dt.tzinfo] = None) -> None:
        self._identity = identity or Identity()
        self._tz = tz

    def _wall(self, dt: Optional[_dt.datetime]) -> Optional[_dt.datetime]:
        if dt is None or dt.tzinfo is None:
            return dt
        local = dt.astimezone(self._tz) if self._tz is not None else dt.astimezone()
        return local.replace(tzinfo=None)

    def _build(
        self,
        component: Any,
        start: _dt.datetime,
        end: _dt.datetime,
        recurrence_id: Optional[_dt.datetime] = None,
    ) -> NormalizedEvent:
        start = self._wall(start)
        end = self._wall(end)
        if end < start:
            LOG.debug("event %s ends before it starts; using start as end", _text("UID", component))
            end = start
        modified = get_property_value("LAST-MODIFIED", component)
        return NormalizedEvent(
            uid=_text("UID", component),
            start=start,
            end=end,
            summary=_text("SUMMARY", component),
            description=_text("DESCRIPTION", component),
            location=_text("LOCATION", component),
            organizer=_optional_text("ORGANIZER", component),
            status=_optional_text("STATUS", component),
            last_modified=self._wall(modified) if isinstance(modified, _dt.datetime) else None,
            duration=Duration.from_timedelta(end - start),
            attendees=normalize_attendees(
                component, self._identity.author_name, self._identity.author_email
            ),
            recurrence_id=self._wall(recurrence_id),
        )

    def normalize_event(self, component: Any) -> NormalizedEvent:
        start, end = component_span(component)
        return self._build(component, start, end)

    def normalize_occurrence(self, occurrence: Occurrence) -> NormalizedEvent:
        start = as_datetime(occurrence.start)
        end = as_datetime(occurrence.end)
        return self._build(occurrence.item, start, end, as_datetime(occurrence.recurrence_id))


def normalize_event(component: Any, author_name: Optional[str] = None, author_email: Optional[str] = None) -> NormalizedEvent:
    return EventNormalizer(Identity(author_name, author_email)).normalize_event(component)


def normalize_occurrence(
    occurrence: Occurrence, author_name: Optional[str] = None, author_email: Optional[str] = None
) -> NormalizedEvent:
    return EventNormalizer(Identity(author_name, author_email)).normalize_occurrence(occurrence)
