"""Render normalized events as an Org document.

The document is produced chunk by chunk (``iter_document``) so a sink can
stream it; nothing already emitted is revisited. Optional event properties
are omitted entirely when absent rather than printed with an empty value.
"""
from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from .constants import DEFAULT_DESCRIPTION, HEADER_WIDTH, PROPERTY_WIDTH
from .formatting import INACTIVE, format_duration, format_range, format_timestamp, render_link
from .model import AttendeeRecord, HeaderFields, NormalizedEvent

__all__ = ["DocumentAssembler", "render_attendee"]


def _prop(name: str, value: str) -> str:
    return f"{f':{name}:':<{PROPERTY_WIDTH}}{value}\n"


def _keyword(name: str, value: Optional[str]) -> str:
    return f"{f'#+{name}:':<{HEADER_WIDTH}}{value or ''}".rstrip() + "\n"


def render_attendee(attendee: AttendeeRecord) -> str:
    label = render_link(attendee.label) or ""
    if attendee.status:
        return f"{label} ({attendee.status})"
    return label


def _organizer(e: NormalizedEvent) -> Optional[str]:
    return render_link(e.organizer) if e.organizer else None


def _status(e: NormalizedEvent) -> Optional[str]:
    return e.status or None


def _last_modified(e: NormalizedEvent) -> Optional[str]:
    return format_timestamp(e.last_modified, INACTIVE) if e.last_modified else None


def _location(e: NormalizedEvent) -> Optional[str]:
    return e.location or None


def _duration(e: NormalizedEvent) -> Optional[str]:
    return format_duration(e.duration) if e.duration else None


def _attendees(e: NormalizedEvent) -> Optional[str]:
    if not e.attendees:
        return None
    return ", ".join(render_attendee(a) for a in e.attendees)


# Drawer properties after :ID:, in output order. A renderer returning None
# means the whole line is left out.
OPTIONAL_PROPERTIES: Tuple[Tuple[str, Callable[[NormalizedEvent], Optional[str]]], ...] = (
    ("ORGANIZER", _organizer),
    ("STATUS", _status),
    ("LAST_MODIFIED", _last_modified),
    ("LOCATION", _location),
    ("DURATION", _duration),
    ("ATTENDEES", _attendees),
)


class DocumentAssembler:
    """Render a header block followed by one Org heading per event."""

    def __init__(self, header: Optional[HeaderFields] = None) -> None:
        self.header = header or HeaderFields()

    def iter_header(self) -> Iterator[str]:
        h = self.header
        yield _keyword("TITLE", h.title)
        yield _keyword("AUTHOR", h.author)
        yield _keyword("EMAIL", h.email)
        yield _keyword("DESCRIPTION", h.description or DEFAULT_DESCRIPTION)
        yield _keyword("CATEGORY", h.category)
        yield _keyword("STARTUP", h.startup)
        yield _keyword("FILETAGS", h.filetags)
        yield "\n"

    def iter_event(self, e: NormalizedEvent) -> Iterator[str]:
        yield f"* {e.summary}\n"
        yield ":PROPERTIES:\n"
        yield _prop("ICAL_EVENT", "t")
        yield _prop("ID", e.uid)
        for name, render in OPTIONAL_PROPERTIES:
            value = render(e)
            if value is not None:
                yield _prop(name, value)
        yield ":END:\n"
        yield format_range(e.start, e.end) + "\n"
        if e.description:
            yield f"\n{e.description}\n"

    def render_event(self, e: NormalizedEvent) -> str:
        return "".join(self.iter_event(e))

    def iter_document(self, events: Iterable[NormalizedEvent]) -> Iterator[str]:
        yield from self.iter_header()
        for e in events:
            yield from self.iter_event(e)

    def assemble(self, events: Iterable[NormalizedEvent]) -> str:
        chunks: List[str] = list(self.iter_document(events))
        return "".join(chunks)
