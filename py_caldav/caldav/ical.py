"""iCalendar encoding and decoding of events.

Events are rendered as VEVENT blocks with a fixed set of properties and
parsed back line by line. See RFC 5545 for the text format.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime

from ..internal import ValidationError
from ..models import Event, NewEvent

PRODID = "-//py-caldav//CalDAV Server//EN"
CRLF = "\r\n"

DATETIME_FORMAT = "%Y%m%dT%H%M%SZ"

_TEXT_ESCAPES = {"\\": "\\\\", ";": "\\;", ",": "\\,", "\n": "\\n"}
_TEXT_UNESCAPE_RE = re.compile(r"\\([\\;,nN])")

_DATE_RE = re.compile(r"\d{8}")
_DATETIME_RE = re.compile(r"\d{8}T\d{6}")
ALL_DAY_MARKER = "VALUE=DATE"

# Components whose properties belong to something other than the event
_NESTED_COMPONENTS = {"VALARM", "VTIMEZONE"}


def escape_text(text: str) -> str:
    """Escape an iCalendar TEXT value."""
    return "".join(_TEXT_ESCAPES.get(c, c) for c in text)


def unescape_text(text: str) -> str:
    """Reverse :func:`escape_text`."""
    return _TEXT_UNESCAPE_RE.sub(
        lambda m: "\n" if m.group(1) in "nN" else m.group(1), text
    )


def format_datetime(dt: datetime) -> str:
    """Render a datetime as a UTC DATE-TIME value."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime(DATETIME_FORMAT)


def parse_datetime(value: str) -> datetime:
    """Parse a DATE or DATE-TIME value into an aware UTC datetime.

    Floating times (no ``Z`` suffix) are taken literally as UTC.

    Raises:
        ValidationError: If the value does not match the DATE or DATE-TIME
            form; a UTC value is read from its first 15 characters
    """
    value = value.strip()

    if len(value) == 8:
        pattern, fmt, what, digits = _DATE_RE, "%Y%m%d", "date", value
    elif value.endswith("Z"):
        # Only the first 15 characters carry the timestamp
        pattern, fmt, what, digits = _DATETIME_RE, "%Y%m%dT%H%M%S", "datetime", value[:15]
    else:
        pattern, fmt, what, digits = _DATETIME_RE, "%Y%m%dT%H%M%S", "datetime", value

    if not pattern.fullmatch(digits):
        raise ValidationError(f"Invalid {what} format: {value!r}")

    try:
        parsed = datetime.strptime(digits, fmt)
    except ValueError as e:
        raise ValidationError(f"Invalid {what} format: {value!r}") from e

    return parsed.replace(tzinfo=UTC)


def encode_event(event: Event) -> str:
    """Encode an event as a CRLF-terminated VEVENT block."""
    lines = [
        "BEGIN:VEVENT",
        f"UID:{event.id}",
        f"SUMMARY:{escape_text(event.title)}",
        f"DESCRIPTION:{escape_text(event.description or '')}",
        f"LOCATION:{escape_text(event.location or '')}",
        f"DTSTART:{format_datetime(event.start)}",
        f"DTEND:{format_datetime(event.end)}",
        "END:VEVENT",
    ]
    return "".join(line + CRLF for line in lines)


def encode_calendar(events: Iterable[Event], name: str | None = None) -> str:
    """Wrap events in a VCALENDAR document.

    Args:
        events: Events to include, in order
        name: Calendar name emitted as ``X-WR-CALNAME`` when given

    Returns:
        iCalendar document with CRLF line endings
    """
    header = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
    ]
    if name is not None:
        header.append(f"X-WR-CALNAME:{escape_text(name)}")

    parts = ["".join(line + CRLF for line in header)]
    parts.extend(encode_event(event) for event in events)
    parts.append("END:VCALENDAR" + CRLF)
    return "".join(parts)


def decode_event(data: str) -> NewEvent:
    """Decode the first-level VEVENT properties of an iCalendar body.

    The body is read line by line; LF and CRLF endings are both accepted and
    every line is trimmed before matching.

    Raises:
        ValidationError: If SUMMARY, DTSTART or DTEND is missing or a
            datetime value is malformed
    """
    title: str | None = None
    description: str | None = None
    location: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    is_all_day = False
    nested = 0

    for raw_line in data.split("\n"):
        line = raw_line.strip()

        if line.startswith("BEGIN:"):
            if nested or line[6:].upper() in _NESTED_COMPONENTS:
                nested += 1
            continue
        if line.startswith("END:"):
            if nested:
                nested -= 1
            continue
        if nested:
            continue

        if line.startswith("SUMMARY:"):
            title = unescape_text(line[8:])
        elif line.startswith("DESCRIPTION:"):
            description = unescape_text(line[12:])
        elif line.startswith("LOCATION:"):
            location = unescape_text(line[9:])
        elif line.startswith("DTSTART"):
            start = parse_datetime(line.rsplit(":", 1)[-1])
            if ALL_DAY_MARKER in line:
                is_all_day = True
        elif line.startswith("DTEND"):
            end = parse_datetime(line.rsplit(":", 1)[-1])
            if ALL_DAY_MARKER in line:
                is_all_day = True

    if title is None:
        raise ValidationError("Missing SUMMARY")
    if start is None:
        raise ValidationError("Missing DTSTART")
    if end is None:
        raise ValidationError("Missing DTEND")

    return NewEvent(
        title=title,
        description=description,
        location=location,
        start=start,
        end=end,
        is_all_day=is_all_day,
    )

