"""Resolution of CalDAV request paths.

Calendar collections live at ``/calendars/{calendar_id}/`` and calendar
objects at ``/calendars/{calendar_id}/{event_id}.ics``.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ..internal import InvalidIdentifierError, ValidationError

CALENDAR_HOME_PATH = "/calendars/"
ICS_SUFFIX = ".ics"


def parse_identifier(value: str) -> UUID:
    """Parse a path segment as a UUID."""
    try:
        return UUID(value)
    except ValueError as e:
        raise InvalidIdentifierError(value) from e


@dataclass(frozen=True)
class ResourcePath:
    """A resolved calendar collection or calendar object path."""

    calendar_id: UUID
    event_name: str | None = None

    @property
    def is_collection(self) -> bool:
        """Whether the path names the whole calendar."""
        return self.event_name is None

    def event_id(self) -> UUID:
        """Parse the event segment as an identifier."""
        if self.event_name is None:
            raise ValidationError("invalid event path")
        return parse_identifier(self.event_name)


def _split(path: str) -> list[str]:
    return path.removeprefix("/").split("/")


def _resolve(parts: list[str]) -> ResourcePath:
    calendar_id = parse_identifier(parts[1])
    if len(parts) < 3 or not parts[2]:
        return ResourcePath(calendar_id=calendar_id)
    return ResourcePath(calendar_id=calendar_id, event_name=parts[2].removesuffix(ICS_SUFFIX))


def parse_calendar_path(path: str) -> ResourcePath:
    """Resolve a calendar collection or calendar object path.

    Args:
        path: Request path, e.g. ``/calendars/{id}/`` or ``/calendars/{id}/{event}.ics``

    Returns:
        ResourcePath; ``event_name`` is None when the path names the whole calendar

    Raises:
        ValidationError: If the path has fewer than two segments
        InvalidIdentifierError: If the calendar segment is not a UUID
    """
    parts = _split(path)
    if len(parts) < 2:
        raise ValidationError("invalid calendar path")
    return _resolve(parts)


def parse_event_path(path: str) -> ResourcePath:
    """Resolve a calendar object path, requiring the event segment.

    Raises:
        ValidationError: If the calendar or event segment is missing
        InvalidIdentifierError: If the calendar segment is not a UUID
    """
    parts = _split(path)
    if len(parts) < 3 or not parts[2]:
        raise ValidationError("invalid event path")
    return _resolve(parts)


def calendar_href(calendar_id: UUID) -> str:
    """Path of a calendar collection."""
    return f"{CALENDAR_HOME_PATH}{calendar_id}/"


def event_href(calendar_id: UUID, event_id: UUID) -> str:
    """Path of a calendar object."""
    return f"{CALENDAR_HOME_PATH}{calendar_id}/{event_id}{ICS_SUFFIX}"
