"""Calendar storage.

The CalDAV handlers only depend on the :class:`CalendarStore` protocol.
:class:`LocalCalendarStore` keeps everything in a directory tree.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol
from uuid import UUID, uuid4

from .models import Calendar, Event, NewCalendar, NewEvent

logger = logging.getLogger(__name__)

METADATA_FILE = ".metadata.json"


class CalendarStore(Protocol):
    """Data access used by the CalDAV handlers.

    Lookups return None when the record does not exist. Any other failure is
    raised and propagates to the caller unchanged.
    """

    async def get_calendar(self, calendar_id: UUID) -> Calendar | None:
        """Get a calendar by id."""
        ...

    async def get_calendars_owned_by(self, principal_id: UUID) -> list[Calendar]:
        """List calendars owned by a user."""
        ...

    async def get_event(self, event_id: UUID) -> Event | None:
        """Get an event by id."""
        ...

    async def get_events_in_calendar(self, calendar_id: UUID) -> list[Event]:
        """List events of a calendar."""
        ...

    async def create_event(self, calendar_id: UUID, draft: NewEvent) -> Event:
        """Persist a new event and return it with its assigned id."""
        ...

    async def delete_event(self, event_id: UUID) -> None:
        """Delete an event."""
        ...

    async def create_calendar(self, owner_id: UUID, draft: NewCalendar) -> Calendar:
        """Persist a new calendar and return it with its assigned id."""
        ...


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class LocalCalendarStore:
    """Filesystem-based calendar store.

    Calendars are stored as directories with metadata in .metadata.json.
    Events are stored as ``<event_id>.json`` files within calendar directories.
    """

    def __init__(self, root_dir: Path) -> None:
        """Initialize store.

        Args:
            root_dir: Root directory for all data
        """
        self.root_dir: Path = Path(root_dir)
        self.calendars_dir: Path = self.root_dir / "calendars"
        self.calendars_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def _calendar_dir(self, calendar_id: UUID) -> Path:
        return self.calendars_dir / str(calendar_id)

    def _read_calendar(self, calendar_dir: Path) -> Calendar:
        with open(calendar_dir / METADATA_FILE) as f:
            data: dict[str, Any] = json.load(f)
        return Calendar(
            id=UUID(data["id"]),
            owner_id=UUID(data["owner_id"]),
            name=str(data["name"]),
            description=_optional_str(data.get("description")),
            color=_optional_str(data.get("color")),
            is_public=bool(data.get("is_public", False)),
        )

    def _write_calendar(self, calendar: Calendar) -> None:
        calendar_dir = self._calendar_dir(calendar.id)
        calendar_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "id": str(calendar.id),
            "owner_id": str(calendar.owner_id),
            "name": calendar.name,
            "description": calendar.description,
            "color": calendar.color,
            "is_public": calendar.is_public,
        }
        with open(calendar_dir / METADATA_FILE, "w") as f:
            json.dump(data, f, indent=2)

    def _read_event(self, event_file: Path) -> Event:
        with open(event_file) as f:
            data: dict[str, Any] = json.load(f)
        return Event(
            id=UUID(data["id"]),
            calendar_id=UUID(data["calendar_id"]),
            title=str(data["title"]),
            description=_optional_str(data.get("description")),
            location=_optional_str(data.get("location")),
            start=_to_utc(datetime.fromisoformat(data["start"])),
            end=_to_utc(datetime.fromisoformat(data["end"])),
            is_all_day=bool(data.get("is_all_day", False)),
        )

    def _write_event(self, event: Event) -> None:
        data = {
            "id": str(event.id),
            "calendar_id": str(event.calendar_id),
            "title": event.title,
            "description": event.description,
            "location": event.location,
            "start": event.start.isoformat(),
            "end": event.end.isoformat(),
            "is_all_day": event.is_all_day,
        }
        event_file = self._calendar_dir(event.calendar_id) / f"{event.id}.json"
        with open(event_file, "w") as f:
            json.dump(data, f, indent=2)

    def _find_event_file(self, event_id: UUID) -> Path | None:
        for event_file in self.calendars_dir.glob(f"*/{event_id}.json"):
            return event_file
        return None

    async def get_calendar(self, calendar_id: UUID) -> Calendar | None:
        """Get calendar by id."""
        calendar_dir = self._calendar_dir(calendar_id)
        if not (calendar_dir / METADATA_FILE).exists():
            return None
        return self._read_calendar(calendar_dir)

    async def get_calendars_owned_by(self, principal_id: UUID) -> list[Calendar]:
        """List all calendars owned by ``principal_id``, sorted by name."""
        calendars = []
        for item in self.calendars_dir.iterdir():
            if item.is_dir() and (item / METADATA_FILE).exists():
                calendar = self._read_calendar(item)
                if calendar.owner_id == principal_id:
                    calendars.append(calendar)
        calendars.sort(key=lambda c: (c.name, str(c.id)))
        return calendars

    async def get_event(self, event_id: UUID) -> Event | None:
        """Get event by id."""
        event_file = self._find_event_file(event_id)
        if event_file is None:
            return None
        return self._read_event(event_file)

    async def get_events_in_calendar(self, calendar_id: UUID) -> list[Event]:
        """List events of a calendar, ordered by start time."""
        calendar_dir = self._calendar_dir(calendar_id)
        if not calendar_dir.exists():
            return []

        events = [
            self._read_event(p)
            for p in calendar_dir.glob("*.json")
            if not p.name.startswith(".")
        ]
        events.sort(key=lambda e: (e.start, str(e.id)))
        return events

    async def create_event(self, calendar_id: UUID, draft: NewEvent) -> Event:
        """Create an event in a calendar with a fresh id."""
        event = Event(
            id=uuid4(),
            calendar_id=calendar_id,
            title=draft.title,
            description=draft.description,
            location=draft.location,
            start=_to_utc(draft.start),
            end=_to_utc(draft.end),
            is_all_day=draft.is_all_day,
        )
        async with self._lock:
            if not self._calendar_dir(calendar_id).exists():
                raise LookupError(f"calendar does not exist: {calendar_id}")
            self._write_event(event)
        logger.debug("Created event %s in calendar %s", event.id, calendar_id)
        return event

    async def delete_event(self, event_id: UUID) -> None:
        """Delete an event; deleting a missing event is a no-op."""
        async with self._lock:
            event_file = self._find_event_file(event_id)
            if event_file is not None:
                event_file.unlink()
        logger.debug("Deleted event %s", event_id)

    async def create_calendar(self, owner_id: UUID, draft: NewCalendar) -> Calendar:
        """Create a calendar owned by ``owner_id`` with a fresh id."""
        calendar = Calendar(
            id=uuid4(),
            owner_id=owner_id,
            name=draft.name,
            description=draft.description,
            color=draft.color,
            is_public=draft.is_public,
        )
        async with self._lock:
            self._write_calendar(calendar)
        logger.debug("Created calendar %s for %s", calendar.id, owner_id)
        return calendar
