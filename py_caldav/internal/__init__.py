"""Low-level helpers for the CalDAV server."""

from .elements import (
    CALDAV_NAMESPACE,
    NAMESPACE,
    NSMAP,
    Href,
    MultiStatus,
    Prop,
    PropStat,
    Response,
    Status,
    new_response,
)
from .internal import (
    AuthenticationError,
    ForbiddenError,
    HTTPError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
    http_error_from_error,
)

__all__ = [
    "CALDAV_NAMESPACE",
    "NAMESPACE",
    "NSMAP",
    "Href",
    "MultiStatus",
    "Prop",
    "PropStat",
    "Response",
    "Status",
    "new_response",
    "AuthenticationError",
    "ForbiddenError",
    "HTTPError",
    "InvalidIdentifierError",
    "NotFoundError",
    "ValidationError",
    "http_error_from_error",
]
