"""Response helpers for the CalDAV server."""

from __future__ import annotations

from starlette.responses import JSONResponse, Response

from .elements import MultiStatus
from .internal import AuthenticationError, http_error_from_error

CALENDAR_MEDIA_TYPE = "text/calendar; charset=utf-8"
XML_MEDIA_TYPE = "application/xml; charset=utf-8"


def serve_error(err: Exception, realm: str = "py-caldav") -> Response:
    """Serve an error response."""
    http_err = http_error_from_error(err)
    code = http_err.code
    # Details of server-side failures stay in the log
    message = http_err.message if code < 500 else "Internal server error"

    headers = {}
    if isinstance(err, AuthenticationError):
        headers["WWW-Authenticate"] = f'Basic realm="{realm}"'

    return JSONResponse(
        content={"error": message, "status": code},
        status_code=code,
        headers=headers,
    )


def serve_multistatus(ms: MultiStatus) -> Response:
    """Serve a multistatus response."""
    return Response(
        content=ms.to_string(),
        status_code=207,  # Multi-Status
        media_type=XML_MEDIA_TYPE,
    )


def serve_calendar(data: str, etag: str | None = None) -> Response:
    """Serve an iCalendar document."""
    headers = {}
    if etag:
        headers["ETag"] = f'"{etag}"'
    return Response(content=data, media_type=CALENDAR_MEDIA_TYPE, headers=headers)
