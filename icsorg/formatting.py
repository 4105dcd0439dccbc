"""Org text formatting for durations, timestamps and mail links.

All helpers are pure. Output formats are exact:

    format_duration(Duration(days=1))          -> "1 d 00:00 hh:mm"
    format_timestamp(dt)                       -> "<2021-08-06 Fri 00:00>"
    format_timestamp(dt, "inactive")           -> "[2021-08-06 Fri 00:00]"
    format_range(start, end)                   -> "<2021-08-05 Thu 12:30-13:20>"
    render_link("fred@bedrock.com")            -> "[[mailto:fred@bedrock.com][fred@bedrock.com]]"
"""
from __future__ import annotations

import datetime as _dt
from typing import Optional

from .constants import FMT_ORG_DATE, FMT_ORG_TIME, WEEKDAY_ABBREV
from .model import Duration

__all__ = [
    "ACTIVE",
    "INACTIVE",
    "format_duration",
    "format_range",
    "format_timestamp",
    "render_link",
]

ACTIVE = "active"
INACTIVE = "inactive"

_BRACKETS = {ACTIVE: ("<", ">"), INACTIVE: ("[", "]")}

MAILTO = "mailto:"


def _pad(v: int) -> str:
    return f"{v:02d}"


def format_duration(d: Duration) -> str:
    # The weeks branch shows hours in both slots; existing org files depend on it.
    if d.weeks:
        return f"{d.weeks} wk {d.days} d {_pad(d.hours)}:{_pad(d.hours)} hh:mm"
    if d.days:
        return f"{d.days} d {_pad(d.hours)}:{_pad(d.minutes)} hh:mm"
    return f"{_pad(d.hours)}:{_pad(d.minutes)} hh:mm"


def _date_part(dt: _dt.datetime) -> str:
    return f"{dt.strftime(FMT_ORG_DATE)} {WEEKDAY_ABBREV[dt.weekday()]}"


def _stamp(dt: _dt.datetime) -> str:
    return f"{_date_part(dt)} {dt.strftime(FMT_ORG_TIME)}"


def format_timestamp(instant: Optional[_dt.datetime], kind: str = ACTIVE) -> str:
    """Render an Org timestamp; empty string when there is no instant."""
    try:
        open_, close = _BRACKETS[kind]
    except KeyError:
        raise ValueError(f"Unknown timestamp kind: {kind!r}") from None
    if not instant:
        return ""
    return f"{open_}{_stamp(instant)}{close}"


def format_range(start: _dt.datetime, end: _dt.datetime) -> str:
    """Render an Org range, collapsed into one bracket on a single day."""
    if start.date() == end.date():
        return f"<{_stamp(start)}-{end.strftime(FMT_ORG_TIME)}>"
    return f"{format_timestamp(start)}--{format_timestamp(end)}"


def render_link(raw: Optional[str]) -> Optional[str]:
    """Turn a mailto URI or bare email address into an Org link.

    Values that look like neither (room names, opaque ids, None) are returned
    unchanged.
    """
    if raw and raw.startswith(MAILTO):
        return f"[[{raw}][{raw[len(MAILTO):]}]]"
    if raw and "@" in raw:
        return f"[[{MAILTO}{raw}][{raw}]]"
    return raw
