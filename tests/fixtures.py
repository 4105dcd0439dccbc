"""Shared test fixtures and utilities.

ICS snippets, component builders and temp-file helpers used across the
icsorg test suite.
"""

from __future__ import annotations

import datetime as _dt
import tempfile
from pathlib import Path
from typing import List, Optional

from icalendar import Calendar

# -----------------------------------------------------------------------------
# ICS helpers
# -----------------------------------------------------------------------------

PLANNING_EVENT = """\
BEGIN:VEVENT
UID:X
DTSTART:20210805T123000
DTEND:20210805T132000
SUMMARY:Planning
LOCATION:Conference Room A
ORGANIZER;CN=Fred Flintstone:mailto:fred@bedrock.com
STATUS:CONFIRMED
LAST-MODIFIED:20210801T100000Z
ATTENDEE;CN=Fred Flintstone;PARTSTAT=ACCEPTED;ROLE=REQ-PARTICIPANT;CUTYPE=INDIVIDUAL:mailto:fred@bedrock.com
ATTENDEE;CN=barney@bedrock.com;PARTSTAT=TENTATIVE:mailto:barney@bedrock.com
DESCRIPTION:Quarterly planning
END:VEVENT
"""

OFFSITE_OVERRIDE = """\
BEGIN:VEVENT
UID:Y
RECURRENCE-ID:20210806T000000
DTSTART:20210806T000000
DTEND:20210807T000000
SUMMARY:Offsite
END:VEVENT
"""

STANDUP_SERIES = """\
BEGIN:VEVENT
UID:standup
DTSTART:20210802T090000
DTEND:20210802T091500
RRULE:FREQ=WEEKLY;COUNT=3
SUMMARY:Standup
LOCATION:Cave
END:VEVENT
BEGIN:VEVENT
UID:standup
RECURRENCE-ID:20210809T090000
DTSTART:20210809T100000
DTEND:20210809T103000
SUMMARY:Standup (moved)
END:VEVENT
"""

EXPECTED_HEADER = """\
#+TITLE:       Calendar
#+AUTHOR:      Fred Flintstone
#+EMAIL:       fred@bedrock.com
#+DESCRIPTION: converted using icsorg
#+CATEGORY:
#+STARTUP:
#+FILETAGS:

"""

EXPECTED_PLANNING = """\
* Planning
:PROPERTIES:
:ICAL_EVENT:    t
:ID:            X
:ORGANIZER:     [[mailto:fred@bedrock.com][fred@bedrock.com]]
:STATUS:        CONFIRMED
:LAST_MODIFIED: [2021-08-01 Sun 10:00]
:LOCATION:      Conference Room A
:DURATION:      00:50 hh:mm
:ATTENDEES:     Fred Flintstone (ACCEPTED), [[mailto:barney@bedrock.com][barney@bedrock.com]] (TENTATIVE)
:END:
<2021-08-05 Thu 12:30-13:20>

Quarterly planning
"""

EXPECTED_OFFSITE = """\
* Offsite
:PROPERTIES:
:ICAL_EVENT:    t
:ID:            Y
:DURATION:      1 d 00:00 hh:mm
:END:
<2021-08-06 Fri 00:00>--<2021-08-07 Sat 00:00>
"""


def make_ics(*vevents: str) -> str:
    body = "".join(vevents)
    text = f"BEGIN:VCALENDAR\nVERSION:2.0\nPRODID:-//icsorg//tests//EN\n{body}END:VCALENDAR\n"
    return text.replace("\n", "\r\n")


def parse_events(*vevents: str) -> List:
    """Parse VEVENT snippets and return the components in source order."""
    return list(Calendar.from_ical(make_ics(*vevents)).walk("VEVENT"))


def parse_event(vevent: str):
    return parse_events(vevent)[0]


def dt(*args: int) -> _dt.datetime:
    return _dt.datetime(*args)


# -----------------------------------------------------------------------------
# File helpers
# -----------------------------------------------------------------------------


def write_text(content: str, dir: Optional[str] = None, filename: str = "calendar.ics") -> str:
    """Write text to a temporary file and return its path."""
    td = dir or tempfile.mkdtemp()
    path = Path(td) / filename
    path.write_text(content, encoding="utf-8")
    return str(path)
