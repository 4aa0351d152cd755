"""WebDAV/CalDAV XML elements used to build multistatus responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from urllib.parse import ParseResult as URL, urlparse

from lxml import etree

# WebDAV namespace
NAMESPACE = "DAV:"
CALDAV_NAMESPACE = "urn:ietf:params:xml:ns:caldav"
NSMAP = {"d": NAMESPACE, "cal": CALDAV_NAMESPACE}

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

# Common XML names
MULTISTATUS = f"{{{NAMESPACE}}}multistatus"
RESPONSE = f"{{{NAMESPACE}}}response"
HREF = f"{{{NAMESPACE}}}href"
PROPSTAT = f"{{{NAMESPACE}}}propstat"
PROP = f"{{{NAMESPACE}}}prop"
STATUS = f"{{{NAMESPACE}}}status"
RESOURCE_TYPE = f"{{{NAMESPACE}}}resourcetype"
DISPLAY_NAME = f"{{{NAMESPACE}}}displayname"
GET_ETAG = f"{{{NAMESPACE}}}getetag"
COLLECTION = f"{{{NAMESPACE}}}collection"

CALENDAR = f"{{{CALDAV_NAMESPACE}}}calendar"
CALENDAR_DATA = f"{{{CALDAV_NAMESPACE}}}calendar-data"
SUPPORTED_CALENDAR_COMPONENT_SET = f"{{{CALDAV_NAMESPACE}}}supported-calendar-component-set"
COMP = f"{{{CALDAV_NAMESPACE}}}comp"


@dataclass
class Status:
    """HTTP status for WebDAV responses."""

    code: int
    text: str = ""

    def to_string(self) -> str:
        """Marshal status to text."""
        text = self.text if self.text else HTTPStatus(self.code).phrase
        return f"HTTP/1.1 {self.code} {text}"


@dataclass
class Href:
    """WebDAV href element."""

    url: URL

    def __str__(self) -> str:
        return self.url.geturl()

    @staticmethod
    def from_string(s: str) -> Href:
        """Parse href from string."""
        return Href(url=urlparse(s))


@dataclass
class Prop:
    """WebDAV prop element."""

    raw: list[etree._Element] = field(default_factory=list)

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        prop = etree.Element(PROP, nsmap=NSMAP)
        for elem in self.raw:
            prop.append(elem)
        return prop


@dataclass
class PropStat:
    """WebDAV propstat element."""

    prop: Prop
    status: Status = field(default_factory=lambda: Status(code=200, text="OK"))

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        propstat = etree.Element(PROPSTAT, nsmap=NSMAP)
        propstat.append(self.prop.to_xml())

        status_el = etree.SubElement(propstat, STATUS)
        status_el.text = self.status.to_string()

        return propstat


@dataclass
class Response:
    """WebDAV response element."""

    hrefs: list[Href] = field(default_factory=list)
    propstats: list[PropStat] = field(default_factory=list)

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        resp = etree.Element(RESPONSE, nsmap=NSMAP)

        for href in self.hrefs:
            href_el = etree.SubElement(resp, HREF)
            href_el.text = str(href)

        for propstat in self.propstats:
            resp.append(propstat.to_xml())

        return resp


@dataclass
class MultiStatus:
    """WebDAV multistatus response."""

    responses: list[Response] = field(default_factory=list)

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        root = etree.Element(MULTISTATUS, nsmap=NSMAP)
        for resp in self.responses:
            root.append(resp.to_xml())
        return root

    def to_string(self) -> str:
        """Serialize to a complete XML document."""
        body = etree.tostring(self.to_xml(), encoding="unicode", pretty_print=True)
        return f"{XML_DECLARATION}\n{body}"


def new_response(href: str, props: list[etree._Element]) -> Response:
    """Create a response carrying ``props`` with a single 200 propstat."""
    return Response(
        hrefs=[Href.from_string(href)],
        propstats=[PropStat(prop=Prop(raw=props))],
    )


def create_calendar_resourcetype() -> etree._Element:
    """Create resourcetype XML element for calendar."""
    rt = etree.Element(RESOURCE_TYPE, nsmap=NSMAP)
    etree.SubElement(rt, COLLECTION)
    etree.SubElement(rt, CALENDAR)
    return rt


def create_displayname(name: str) -> etree._Element:
    """Create displayname XML element."""
    elem = etree.Element(DISPLAY_NAME, nsmap=NSMAP)
    elem.text = name
    return elem


def create_supported_components(components: list[str]) -> etree._Element:
    """Create supported-calendar-component-set XML element."""
    elem = etree.Element(SUPPORTED_CALENDAR_COMPONENT_SET, nsmap=NSMAP)
    for comp in components:
        comp_elem = etree.SubElement(elem, COMP)
        comp_elem.set("name", comp)
    return elem


def create_etag(etag: str) -> etree._Element:
    """Create getetag XML element."""
    elem = etree.Element(GET_ETAG, nsmap=NSMAP)
    elem.text = f'"{etag}"'
    return elem


def create_calendar_data(data: str) -> etree._Element:
    """Create calendar-data XML element."""
    elem = etree.Element(CALENDAR_DATA, nsmap=NSMAP)
    elem.text = data
    return elem
