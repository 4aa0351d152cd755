#!/usr/bin/env python3
"""Create a sample user, calendar and event for a local server."""

import asyncio
import sys
from pathlib import Path

from py_caldav.auth import UserDirectory
from py_caldav.caldav import decode_event
from py_caldav.models import NewCalendar
from py_caldav.store import LocalCalendarStore

SAMPLE_USER = "alice@example.com"
SAMPLE_PASSWORD = "wonderland"

# Sample iCalendar event
SAMPLE_EVENT = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp//CalDAV Client//EN
BEGIN:VEVENT
UID:event-001@example.com
DTSTAMP:20250109T120000Z
DTSTART:20250115T100000Z
DTEND:20250115T110000Z
SUMMARY:Team Meeting
DESCRIPTION:Weekly team sync
LOCATION:Conference Room A
END:VEVENT
END:VCALENDAR
"""


async def create_sample_data(data_dir: Path) -> None:
    """Create sample users and calendar data.

    Args:
        data_dir: Root directory for data
    """
    data_dir.mkdir(parents=True, exist_ok=True)

    users_file = data_dir / "users.json"
    directory = UserDirectory.load(users_file) if users_file.exists() else UserDirectory()
    user = directory.get(SAMPLE_USER)
    if user is None:
        user = directory.add_user(SAMPLE_USER, SAMPLE_PASSWORD, name="Alice")
        directory.save(users_file)
    print(f"User {user.email} / {SAMPLE_PASSWORD} in {users_file}")

    store = LocalCalendarStore(data_dir)
    calendar = await store.create_calendar(
        user.id,
        NewCalendar(name="Work Calendar", description="Work events and meetings"),
    )
    event = await store.create_event(calendar.id, decode_event(SAMPLE_EVENT))

    print(f"Created calendar: /calendars/{calendar.id}/")
    print(f"Created event:    /calendars/{calendar.id}/{event.id}.ics")
    print()
    print("Start the server with:")
    print(f"  py-caldav-server --data-dir {data_dir} --users-file {users_file}")


if __name__ == "__main__":
    data_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "./data")
    asyncio.run(create_sample_data(data_dir))
