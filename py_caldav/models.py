"""Calendar, event and user records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

# Components advertised in supported-calendar-component-set
SUPPORTED_COMPONENTS = ["VEVENT", "VTODO"]


@dataclass
class User:
    """An account that can authenticate and own calendars."""

    id: UUID
    email: str
    password_hash: str
    name: str = ""


@dataclass
class Calendar:
    """Calendar collection owned by exactly one user."""

    id: UUID
    owner_id: UUID
    name: str
    description: str | None = None
    color: str | None = None
    is_public: bool = False


@dataclass
class NewCalendar:
    """Calendar to be created by the store."""

    name: str
    description: str | None = None
    color: str | None = None
    is_public: bool = False


@dataclass
class Event:
    """Calendar event.

    ``start`` and ``end`` are timezone-aware; ``start <= end`` is not enforced.
    """

    id: UUID
    calendar_id: UUID
    title: str
    start: datetime
    end: datetime
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False


@dataclass
class NewEvent:
    """Draft event decoded from iCalendar data, without id or calendar."""

    title: str
    start: datetime
    end: datetime
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False
