"""CalDAV method handlers.

Each handler serves one CalDAV verb for an authenticated principal. Handlers
keep no state between requests: every call reads fresh records from the
calendar store and raises an :class:`~py_caldav.internal.HTTPError` subclass
on failure.
"""

from __future__ import annotations

import logging

from lxml import etree
from starlette.responses import PlainTextResponse, Response

from ..auth import RequestContext
from ..internal import ForbiddenError, MultiStatus, NotFoundError, ValidationError, new_response
from ..internal.elements import (
    CALDAV_NAMESPACE,
    DISPLAY_NAME,
    create_calendar_data,
    create_calendar_resourcetype,
    create_displayname,
    create_etag,
    create_supported_components,
)
from ..internal.server import serve_calendar, serve_multistatus
from ..models import SUPPORTED_COMPONENTS, Calendar, NewCalendar
from ..store import CalendarStore
from .ical import decode_event, encode_calendar, encode_event
from .paths import (
    CALENDAR_HOME_PATH,
    calendar_href,
    event_href,
    parse_calendar_path,
    parse_event_path,
)
from .report import CALENDAR_MULTIGET, CALENDAR_QUERY, report_kind

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_NAME = "New Calendar"
CALENDAR_DESCRIPTION = f"{{{CALDAV_NAMESPACE}}}calendar-description"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def check_owner(ctx: RequestContext, calendar: Calendar) -> None:
    """Require the principal to own the calendar."""
    if calendar.owner_id != ctx.principal_id:
        raise ForbiddenError("You don't own this calendar")


def check_readable(ctx: RequestContext, calendar: Calendar) -> None:
    """Require the calendar to be owned by the principal or public."""
    if calendar.owner_id != ctx.principal_id and not calendar.is_public:
        raise ForbiddenError("Access denied")


async def _load_calendar(store: CalendarStore, calendar_id) -> Calendar:
    calendar = await store.get_calendar(calendar_id)
    if calendar is None:
        raise NotFoundError("Calendar not found")
    return calendar


async def handle_discovery() -> Response:
    """Handle ``GET /.well-known/caldav``."""
    return PlainTextResponse(CALENDAR_HOME_PATH)


async def handle_propfind(ctx: RequestContext, store: CalendarStore) -> Response:
    """List the principal's calendars as a multistatus response."""
    calendars = await store.get_calendars_owned_by(ctx.principal_id)

    responses = [
        new_response(
            calendar_href(calendar.id),
            [
                create_calendar_resourcetype(),
                create_displayname(calendar.name),
                create_supported_components(SUPPORTED_COMPONENTS),
            ],
        )
        for calendar in calendars
    ]
    return serve_multistatus(MultiStatus(responses=responses))


async def handle_report(ctx: RequestContext, store: CalendarStore, body: bytes) -> Response:
    """Return every event of every calendar the principal owns.

    The report body is not interpreted; calendar-query filters and
    calendar-multiget hrefs are ignored.
    """
    kind = report_kind(body)
    if kind in (CALENDAR_QUERY, CALENDAR_MULTIGET):
        logger.debug("REPORT %s: conditions ignored, returning all events", kind)
    elif kind is not None:
        logger.debug("REPORT %s is not supported, returning all events", kind)

    calendars = await store.get_calendars_owned_by(ctx.principal_id)
    events = []
    for calendar in calendars:
        events.extend(await store.get_events_in_calendar(calendar.id))

    responses = [
        new_response(
            event_href(event.calendar_id, event.id),
            [
                create_etag(str(event.id)),
                create_calendar_data(encode_event(event)),
            ],
        )
        for event in events
    ]
    return serve_multistatus(MultiStatus(responses=responses))


async def handle_get(ctx: RequestContext, store: CalendarStore, path: str) -> Response:
    """Serve a whole calendar or a single event as iCalendar data."""
    resource = parse_calendar_path(path)
    calendar = await _load_calendar(store, resource.calendar_id)
    check_readable(ctx, calendar)

    if resource.is_collection:
        events = await store.get_events_in_calendar(calendar.id)
        return serve_calendar(encode_calendar(events, name=calendar.name))

    event_id = resource.event_id()
    event = await store.get_event(event_id)
    if event is None or event.calendar_id != calendar.id:
        raise NotFoundError("Event not found")

    return serve_calendar(encode_calendar([event]), etag=str(event.id))


async def handle_put(ctx: RequestContext, store: CalendarStore, path: str, body: str) -> Response:
    """Create an event from an iCalendar body.

    A new event is always created; the identifier in the URL is not reused.
    """
    resource = parse_event_path(path)
    calendar = await _load_calendar(store, resource.calendar_id)
    check_owner(ctx, calendar)

    draft = decode_event(body)
    event = await store.create_event(calendar.id, draft)
    logger.info("Created event %s in calendar %s", event.id, calendar.id)

    return Response(
        status_code=201,
        headers={
            "Location": event_href(calendar.id, event.id),
            "ETag": f'"{event.id}"',
        },
    )


async def handle_delete(ctx: RequestContext, store: CalendarStore, path: str) -> Response:
    """Delete a single event."""
    resource = parse_event_path(path)
    event_id = resource.event_id()

    event = await store.get_event(event_id)
    if event is None or event.calendar_id != resource.calendar_id:
        raise NotFoundError("Event not found")

    calendar = await _load_calendar(store, event.calendar_id)
    check_owner(ctx, calendar)

    await store.delete_event(event.id)
    logger.info("Deleted event %s from calendar %s", event.id, calendar.id)
    return Response(status_code=204)


def _parse_mkcol_body(body: bytes) -> NewCalendar:
    """Read the display name and description of an extended MKCOL body."""
    draft = NewCalendar(name=DEFAULT_CALENDAR_NAME)
    if not body.strip():
        return draft

    try:
        root = etree.fromstring(body, _PARSER)
    except etree.XMLSyntaxError as e:
        raise ValidationError(f"invalid MKCOL body: {e}") from e

    name_el = root.find(f".//{DISPLAY_NAME}")
    if name_el is not None and name_el.text and name_el.text.strip():
        draft.name = name_el.text.strip()

    desc_el = root.find(f".//{CALENDAR_DESCRIPTION}")
    if desc_el is not None and desc_el.text:
        draft.description = desc_el.text
    return draft


async def handle_mkcol(ctx: RequestContext, store: CalendarStore, body: bytes) -> Response:
    """Create a calendar owned by the principal."""
    draft = _parse_mkcol_body(body)
    calendar = await store.create_calendar(ctx.principal_id, draft)
    logger.info("Created calendar %s for %s", calendar.id, ctx.principal_id)
    return Response(status_code=201, headers={"Location": calendar_href(calendar.id)})
