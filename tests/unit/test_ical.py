"""Tests for iCalendar event encoding and decoding."""

from datetime import UTC, datetime, timedelta, timezone
from uuid import UUID

import pytest

from py_caldav.caldav.ical import (
    PRODID,
    decode_event,
    encode_calendar,
    encode_event,
    escape_text,
    format_datetime,
    parse_datetime,
    unescape_text,
)
from py_caldav.internal import ValidationError
from py_caldav.models import Event

EVENT_ID = UUID("6f1c7f1e-3a38-4f5e-9d6b-1f2d3c4b5a69")
CALENDAR_ID = UUID("0b8e6a62-5a0e-4a57-8d4e-2f0c1b9d7e31")


def make_event(**kwargs) -> Event:
    values = {
        "id": EVENT_ID,
        "calendar_id": CALENDAR_ID,
        "title": "Standup",
        "start": datetime(2024, 3, 1, 9, 0, tzinfo=UTC),
        "end": datetime(2024, 3, 1, 9, 15, tzinfo=UTC),
    }
    values.update(kwargs)
    return Event(**values)


def wrap(*lines: str) -> str:
    """Build a CRLF iCalendar body around VEVENT property lines."""
    body = ["BEGIN:VCALENDAR", "VERSION:2.0", "BEGIN:VEVENT", *lines, "END:VEVENT", "END:VCALENDAR"]
    return "\r\n".join(body) + "\r\n"


def test_escape_text():
    """Test that TEXT special characters are escaped."""
    assert escape_text("a\\b;c,d\ne") == "a\\\\b\\;c\\,d\\ne"
    assert escape_text("plain text") == "plain text"


def test_unescape_text():
    """Test that escaped TEXT values are restored."""
    assert unescape_text("a\\\\b\\;c\\,d\\ne") == "a\\b;c,d\ne"
    assert unescape_text("line\\Nbreak") == "line\nbreak"


def test_title_escaping_survives_round_trip():
    """Test that a title with every special character round-trips."""
    title = "Team; Sync, Room\\1\nFinal"
    encoded = encode_calendar([make_event(title=title)])

    assert "SUMMARY:Team\\; Sync\\, Room\\\\1\\nFinal\r\n" in encoded

    decoded = decode_event(encoded)
    assert decoded.title == title, f"Expected {title!r}, got {decoded.title!r}"


def test_encode_event():
    """Test the exact VEVENT layout."""
    event = make_event(description="Daily sync", location="Room 1")

    assert encode_event(event) == (
        "BEGIN:VEVENT\r\n"
        f"UID:{EVENT_ID}\r\n"
        "SUMMARY:Standup\r\n"
        "DESCRIPTION:Daily sync\r\n"
        "LOCATION:Room 1\r\n"
        "DTSTART:20240301T090000Z\r\n"
        "DTEND:20240301T091500Z\r\n"
        "END:VEVENT\r\n"
    )


def test_encode_event_empty_optional_fields():
    """Test that missing description and location are emitted empty."""
    encoded = encode_event(make_event())

    assert "DESCRIPTION:\r\n" in encoded
    assert "LOCATION:\r\n" in encoded


def test_encode_event_converts_to_utc():
    """Test that offsets are converted to UTC."""
    plus_two = timezone(timedelta(hours=2))
    event = make_event(
        start=datetime(2024, 3, 1, 11, 0, tzinfo=plus_two),
        end=datetime(2024, 3, 1, 11, 15, tzinfo=plus_two),
    )
    encoded = encode_event(event)

    assert "DTSTART:20240301T090000Z\r\n" in encoded
    assert "DTEND:20240301T091500Z\r\n" in encoded


def test_encode_all_day_event_uses_datetime_form():
    """Test that all-day events are still written as UTC DATE-TIME values."""
    event = make_event(
        start=datetime(2024, 3, 1, tzinfo=UTC),
        end=datetime(2024, 3, 2, tzinfo=UTC),
        is_all_day=True,
    )
    assert "DTSTART:20240301T000000Z\r\n" in encode_event(event)


def test_encode_calendar_empty():
    """Test an empty calendar document."""
    assert encode_calendar([]) == (
        "BEGIN:VCALENDAR\r\n"
        "VERSION:2.0\r\n"
        f"PRODID:{PRODID}\r\n"
        "CALSCALE:GREGORIAN\r\n"
        "END:VCALENDAR\r\n"
    )


def test_encode_calendar_with_name():
    """Test that the calendar name is emitted escaped."""
    encoded = encode_calendar([], name="Work; Home")
    assert "X-WR-CALNAME:Work\\; Home\r\n" in encoded


def test_encode_calendar_keeps_event_order():
    """Test that events appear in the given order."""
    first = make_event(title="First")
    second = make_event(id=UUID(int=2), title="Second")
    encoded = encode_calendar([first, second])

    assert encoded.count("BEGIN:VEVENT") == 2
    assert encoded.index("SUMMARY:First") < encoded.index("SUMMARY:Second")
    assert encoded.endswith("END:VEVENT\r\nEND:VCALENDAR\r\n")


def test_decode_event():
    """Test decoding a typical client body."""
    data = wrap(
        "UID:client-uid-1",
        "SUMMARY:Standup",
        "DESCRIPTION:Daily sync",
        "LOCATION:Room 1",
        "DTSTART:20240301T090000Z",
        "DTEND:20240301T091500Z",
    )
    event = decode_event(data)

    assert event.title == "Standup"
    assert event.description == "Daily sync"
    assert event.location == "Room 1"
    assert event.start == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    assert event.end == datetime(2024, 3, 1, 9, 15, tzinfo=UTC)
    assert event.is_all_day is False


def test_decode_event_lf_line_endings():
    """Test that bare LF line endings are accepted."""
    data = wrap("SUMMARY:Lunch", "DTSTART:20240301T120000Z", "DTEND:20240301T130000Z")
    event = decode_event(data.replace("\r\n", "\n"))

    assert event.title == "Lunch"


def test_decode_event_optional_fields_absent():
    """Test that missing DESCRIPTION and LOCATION decode as None."""
    event = decode_event(wrap("SUMMARY:x", "DTSTART:20240301T120000Z", "DTEND:20240301T130000Z"))

    assert event.description is None
    assert event.location is None


def test_decode_all_day_event():
    """Test that VALUE=DATE marks an all-day event."""
    event = decode_event(
        wrap("SUMMARY:Holiday", "DTSTART;VALUE=DATE:20240301", "DTEND;VALUE=DATE:20240302")
    )

    assert event.is_all_day is True
    assert event.start == datetime(2024, 3, 1, tzinfo=UTC)
    assert event.end == datetime(2024, 3, 2, tzinfo=UTC)


def test_decode_plain_date_is_not_all_day():
    """Test that a DATE value without VALUE=DATE only sets the start."""
    event = decode_event(wrap("SUMMARY:x", "DTSTART:20240115", "DTEND:20240115T143000Z"))

    assert event.start == datetime(2024, 1, 15, tzinfo=UTC)
    assert event.end == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)
    assert event.is_all_day is False


def test_encode_decode_round_trip():
    """Test that decoding an encoded event recovers its fields."""
    event = make_event(description="Daily sync, all hands", location="Room 1; floor 2")
    decoded = decode_event(encode_calendar([event]))

    assert decoded.title == event.title
    assert decoded.description == event.description
    assert decoded.location == event.location
    assert decoded.start == event.start
    assert decoded.end == event.end


def test_decode_value_date_time_marks_all_day():
    """Test that the VALUE=DATE substring check also matches VALUE=DATE-TIME."""
    event = decode_event(
        wrap(
            "SUMMARY:Call",
            "DTSTART;VALUE=DATE-TIME:20240301T090000Z",
            "DTEND;VALUE=DATE-TIME:20240301T093000Z",
        )
    )

    assert event.is_all_day is True, "Expected the all-day flag to be set"
    assert event.end == datetime(2024, 3, 1, 9, 30, tzinfo=UTC)


def test_decode_floating_time_taken_as_utc():
    """Test that times with a TZID but no Z suffix are read literally."""
    event = decode_event(
        wrap(
            "SUMMARY:Call",
            "DTSTART;TZID=Europe/Berlin:20240301T090000",
            "DTEND;TZID=Europe/Berlin:20240301T100000",
        )
    )

    assert event.start == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def test_decode_ignores_alarm_and_timezone_properties():
    """Test that VALARM and VTIMEZONE properties do not leak into the event."""
    data = "\r\n".join(
        [
            "BEGIN:VCALENDAR",
            "BEGIN:VTIMEZONE",
            "TZID:Europe/Berlin",
            "BEGIN:STANDARD",
            "DTSTART:19701025T030000",
            "END:STANDARD",
            "END:VTIMEZONE",
            "BEGIN:VEVENT",
            "SUMMARY:Dentist",
            "DTSTART:20240301T090000Z",
            "DTEND:20240301T100000Z",
            "BEGIN:VALARM",
            "ACTION:DISPLAY",
            "DESCRIPTION:Reminder",
            "END:VALARM",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
    )
    event = decode_event(data)

    assert event.description is None
    assert event.start == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "lines,missing",
    [
        (("DTSTART:20240301T090000Z", "DTEND:20240301T100000Z"), "SUMMARY"),
        (("SUMMARY:x", "DTEND:20240301T100000Z"), "DTSTART"),
        (("SUMMARY:x", "DTSTART:20240301T090000Z"), "DTEND"),
    ],
)
def test_decode_missing_required_property(lines, missing):
    """Test that required properties are enforced."""
    with pytest.raises(ValidationError, match=f"Missing {missing}"):
        decode_event(wrap(*lines))


def test_decode_invalid_datetime():
    """Test that a malformed DTSTART is rejected."""
    with pytest.raises(ValidationError, match="Invalid datetime format"):
        decode_event(wrap("SUMMARY:x", "DTSTART:2024-03-01", "DTEND:20240301T100000Z"))


def test_parse_datetime_forms():
    """Test the DATE, UTC and local DATE-TIME forms."""
    assert parse_datetime("20240301") == datetime(2024, 3, 1, tzinfo=UTC)
    assert parse_datetime("20240301T090000Z") == datetime(2024, 3, 1, 9, tzinfo=UTC)
    assert parse_datetime("20240301T090000") == datetime(2024, 3, 1, 9, tzinfo=UTC)


def test_parse_datetime_utc_reads_first_fifteen_characters():
    """Test that only the leading timestamp of a Z-suffixed value is read."""
    assert parse_datetime("20240115T1430001Z") == datetime(2024, 1, 15, 14, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    "value,message",
    [
        ("20241301", "Invalid date format"),
        ("2024030", "Invalid datetime format"),
        ("20240301T0900Z", "Invalid datetime format"),
        ("20240301T250000Z", "Invalid datetime format"),
        ("next week", "Invalid datetime format"),
    ],
)
def test_parse_datetime_invalid(value, message):
    """Test that malformed values are rejected."""
    with pytest.raises(ValidationError, match=message):
        parse_datetime(value)


def test_format_datetime_naive_is_utc():
    """Test that naive datetimes are treated as UTC."""
    assert format_datetime(datetime(2024, 3, 1, 9, 0)) == "20240301T090000Z"
