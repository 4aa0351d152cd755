"""A small CalDAV calendar server."""

from .auth import BasicAuthenticator, RequestContext, UserDirectory
from .config import ConfigError, ServerConfig
from .models import Calendar, Event, NewCalendar, NewEvent, User
from .server import Handler, create_app
from .store import CalendarStore, LocalCalendarStore

__version__ = "0.1.0"

__all__ = [
    "BasicAuthenticator",
    "RequestContext",
    "UserDirectory",
    "ConfigError",
    "ServerConfig",
    "Calendar",
    "Event",
    "NewCalendar",
    "NewEvent",
    "User",
    "Handler",
    "create_app",
    "CalendarStore",
    "LocalCalendarStore",
]
