"""Debug logging utilities for the CalDAV server."""

from __future__ import annotations

import logging
from typing import Any

from lxml import etree

logger = logging.getLogger("py_caldav")

BODY_PREVIEW_BYTES = 200

REQUEST_HEADERS = [
    "Content-Type",
    "Content-Length",
    "Depth",
    "If-Match",
    "If-None-Match",
    "Authorization",
]
RESPONSE_HEADERS = ["Content-Type", "Content-Length", "ETag", "Location", "WWW-Authenticate"]


def format_xml(xml_bytes: bytes | str) -> str:
    """Format XML with proper indentation.

    Args:
        xml_bytes: XML content as bytes or string

    Returns:
        Pretty-formatted XML string, or the input unchanged if it is not XML
    """
    if isinstance(xml_bytes, str):
        xml_bytes = xml_bytes.encode("utf-8")

    try:
        parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
        root = etree.fromstring(xml_bytes, parser)
    except etree.XMLSyntaxError:
        return xml_bytes.decode("utf-8", errors="replace")
    return etree.tostring(root, pretty_print=True, encoding="unicode")


def is_xml_content(content_type: str | None) -> bool:
    """Check if content type is XML."""
    if not content_type:
        return False
    content_type = content_type.lower()
    return "application/xml" in content_type or "text/xml" in content_type


def _log_headers(names: list[str], headers: dict[str, Any]) -> None:
    logger.debug("Headers:")
    for header in names:
        value = headers.get(header.lower(), headers.get(header))
        if value:
            if header == "Authorization":
                value = "[REDACTED]"
            logger.debug(f"  {header}: {value}")


def _log_body(label: str, content_type: str, body: bytes) -> None:
    logger.debug("-" * 80)
    logger.debug(f"{label}:")

    if is_xml_content(content_type):
        for line in format_xml(body).split("\n"):
            if line.strip():
                logger.debug(f"  {line}")
    else:
        preview = body[:BODY_PREVIEW_BYTES].decode("utf-8", errors="replace")
        logger.debug(f"  [{len(body)} bytes] {preview}")
        if len(body) > BODY_PREVIEW_BYTES:
            logger.debug(f"  ... ({len(body) - BODY_PREVIEW_BYTES} more bytes)")


def log_request(method: str, path: str, headers: dict[str, str], body: bytes | None) -> None:
    """Log an incoming HTTP request.

    Args:
        method: HTTP method
        path: Request path
        headers: Request headers
        body: Request body (if any)
    """
    logger.debug("=" * 80)
    logger.debug(f">>> INCOMING REQUEST: {method} {path}")
    logger.debug("-" * 80)
    _log_headers(REQUEST_HEADERS, headers)
    if body:
        _log_body("Request Body", headers.get("content-type", ""), body)
    logger.debug("=" * 80)


def log_response(status_code: int, headers: dict[str, Any], body: bytes | None) -> None:
    """Log an outgoing HTTP response.

    Args:
        status_code: HTTP status code
        headers: Response headers
        body: Response body (if any)
    """
    logger.debug("=" * 80)
    logger.debug(f"<<< OUTGOING RESPONSE: {status_code}")
    logger.debug("-" * 80)
    _log_headers(RESPONSE_HEADERS, headers)
    if body:
        _log_body("Response Body", headers.get("content-type", ""), body)
    logger.debug("=" * 80)


def setup_logging(debug: bool = False) -> None:
    """Configure console logging for the server."""
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if debug else logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False
