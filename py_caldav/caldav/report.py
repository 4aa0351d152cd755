"""CalDAV REPORT request handling."""

from __future__ import annotations

from lxml import etree

from ..internal.elements import CALDAV_NAMESPACE

CALENDAR_QUERY = "calendar-query"
CALENDAR_MULTIGET = "calendar-multiget"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def report_kind(body: bytes) -> str | None:
    """Return the local name of a REPORT body's root element.

    Args:
        body: Raw request body

    Returns:
        e.g. ``"calendar-query"``, or None for an empty or unparseable body
    """
    if not body.strip():
        return None
    try:
        root = etree.fromstring(body, _PARSER)
    except etree.XMLSyntaxError:
        return None

    qname = etree.QName(root)
    if qname.namespace != CALDAV_NAMESPACE:
        return f"{{{qname.namespace}}}{qname.localname}" if qname.namespace else qname.localname
    return qname.localname
