"""CalDAV support for py-caldav."""

from .ical import (
    PRODID,
    decode_event,
    encode_calendar,
    encode_event,
    escape_text,
    parse_datetime,
    unescape_text,
)
from .paths import ResourcePath, calendar_href, event_href, parse_calendar_path, parse_event_path
from .server import (
    handle_delete,
    handle_discovery,
    handle_get,
    handle_mkcol,
    handle_propfind,
    handle_put,
    handle_report,
)

__all__ = [
    "PRODID",
    "decode_event",
    "encode_calendar",
    "encode_event",
    "escape_text",
    "parse_datetime",
    "unescape_text",
    "ResourcePath",
    "calendar_href",
    "event_href",
    "parse_calendar_path",
    "parse_event_path",
    "handle_delete",
    "handle_discovery",
    "handle_get",
    "handle_mkcol",
    "handle_propfind",
    "handle_put",
    "handle_report",
]
