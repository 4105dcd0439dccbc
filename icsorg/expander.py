"""Calendar expansion: raw ICS text + window -> masters and occurrences.

Recurrence rule math is delegated to ``recurring_ical_events``; this module
only splits its output into stand-alone events and instances of recurring
series, and marks the instances that come from an override component.
"""
from __future__ import annotations

import datetime as _dt
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

import icalendar
import recurring_ical_events

from .constants import DEFAULT_MAX_ITERATIONS
from .errors import ExpansionError
from .fields import as_datetime, first_property, get_property_value
from .model import ExpandedWindow, Occurrence

LOG = logging.getLogger(__name__)

__all__ = ["CalendarExpander", "IcalExpander", "parse_calendar"]

SERIES_PROPERTIES = ("RRULE", "RDATE", "RECURRENCE-ID")


class CalendarExpander(Protocol):
    def expand(self, ics_text: str, window_start: _dt.datetime, window_end: _dt.datetime) -> ExpandedWindow:
        ...


def parse_calendar(ics_text: str) -> icalendar.Calendar:
    """Parse ICS text, raising ExpansionError when it is not a calendar."""
    try:
        return icalendar.Calendar.from_ical(ics_text)
    except ValueError as exc:
        raise ExpansionError(
            f"expand: unable to parse calendar data: {exc}",
            hint="Check that the source returns an .ics document",
        ) from exc


def _key(value: Any) -> Optional[_dt.datetime]:
    dt = as_datetime(getattr(value, "dt", value))
    if dt is not None and dt.tzinfo is not None:
        dt = dt.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return dt


def _uid(component: Any) -> str:
    return str(get_property_value("UID", component))


class IcalExpander:
    """CalendarExpander backed by icalendar and recurring_ical_events.

    ``max_iterations`` caps the number of instances kept per series.
    """

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> None:
        self.max_iterations = max_iterations

    @staticmethod
    def _index_series(calendar: icalendar.Calendar) -> Tuple[Set[str], Dict[Tuple[str, Any], _dt.datetime]]:
        series: Set[str] = set()
        overrides: Dict[Tuple[str, Any], _dt.datetime] = {}
        for comp in calendar.walk("VEVENT"):
            if not any(name in comp for name in SERIES_PROPERTIES):
                continue
            uid = _uid(comp)
            series.add(uid)
            rid_prop = first_property("RECURRENCE-ID", comp)
            if rid_prop is None:
                continue
            overrides[(uid, _key(rid_prop))] = as_datetime(rid_prop.dt)
        return series, overrides

    def _occurrence(self, instance: Any, uid: str, overrides: Dict[Tuple[str, Any], _dt.datetime]) -> Occurrence:
        start = as_datetime(first_property("DTSTART", instance).dt)
        end_prop = first_property("DTEND", instance)
        end = as_datetime(end_prop.dt) if end_prop is not None else start
        # Instances carry the RECURRENCE-ID of the slot they fill; only slots
        # with an override component count as overridden.
        rid_prop = first_property("RECURRENCE-ID", instance)
        rid = overrides.get((uid, _key(rid_prop))) if rid_prop is not None else None
        return Occurrence(start=start, end=end, item=instance, recurrence_id=rid)

    def expand(self, ics_text: str, window_start: _dt.datetime, window_end: _dt.datetime) -> ExpandedWindow:
        calendar = parse_calendar(ics_text)
        series, overrides = self._index_series(calendar)
        try:
            instances = recurring_ical_events.of(calendar).between(window_start, window_end)
        except Exception as exc:  # the library raises assorted errors on bad rules
            raise ExpansionError(f"expand: {type(exc).__name__}: {exc}") from exc

        events: List[Any] = []
        occurrences: List[Occurrence] = []
        per_series: Dict[str, int] = defaultdict(int)
        for instance in instances:
            if instance.name != "VEVENT":
                continue
            uid = _uid(instance)
            if uid not in series:
                events.append(instance)
                continue
            per_series[uid] += 1
            if per_series[uid] > self.max_iterations:
                continue
            occurrences.append(self._occurrence(instance, uid, overrides))
        LOG.debug(
            "expanded %s..%s: %d events, %d occurrences",
            window_start, window_end, len(events), len(occurrences),
        )
        return ExpandedWindow(events=tuple(events), occurrences=tuple(occurrences))
