"""Authentication of CalDAV requests.

Credentials are checked against a :class:`UserDirectory` of bcrypt password
hashes. A successful check yields a :class:`RequestContext` that is passed
explicitly to every handler.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import UUID, uuid4

import bcrypt
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from .models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Authenticated principal of a single request."""

    principal_id: UUID


class Authenticator(Protocol):
    """Resolves a request to an authenticated principal."""

    async def authenticate(self, request: Request) -> RequestContext | None:
        """Return the request context, or None if the request is unauthenticated."""
        ...


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def check_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # Malformed hash in the users file
        logger.warning("Ignoring malformed password hash")
        return False


class UserDirectory:
    """Users known to the server, keyed by email address."""

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: dict[str, User] = {}
        for user in users or []:
            self._users[user.email.lower()] = user

    @classmethod
    def load(cls, path: Path) -> UserDirectory:
        """Load users from a JSON file.

        The file holds a list of objects with ``id``, ``email``, ``name`` and
        ``password_hash`` keys.
        """
        with open(path) as f:
            data = json.load(f)

        users = [
            User(
                id=UUID(entry["id"]),
                email=str(entry["email"]),
                name=str(entry.get("name", "")),
                password_hash=str(entry["password_hash"]),
            )
            for entry in data
        ]
        logger.info("Loaded %d user(s) from %s", len(users), path)
        return cls(users)

    def save(self, path: Path) -> None:
        """Write users to a JSON file."""
        data = [
            {
                "id": str(user.id),
                "email": user.email,
                "name": user.name,
                "password_hash": user.password_hash,
            }
            for user in self._users.values()
        ]
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def __len__(self) -> int:
        return len(self._users)

    def get(self, email: str) -> User | None:
        """Look up a user by email."""
        return self._users.get(email.lower())

    def add_user(self, email: str, password: str, name: str = "", user_id: UUID | None = None) -> User:
        """Add a user with a freshly hashed password.

        Raises:
            ValueError: If a user with that email already exists
        """
        if self.get(email) is not None:
            raise ValueError(f"user already exists: {email}")
        user = User(
            id=user_id or uuid4(),
            email=email,
            name=name,
            password_hash=hash_password(password),
        )
        self._users[email.lower()] = user
        return user

    async def verify(self, email: str, password: str) -> User | None:
        """Return the user if the password matches."""
        user = self.get(email)
        if user is None:
            return None
        if await run_in_threadpool(check_password, password, user.password_hash):
            return user
        return None


def parse_basic_authorization(header: str) -> tuple[str, str] | None:
    """Parse an ``Authorization: Basic`` header into (username, password)."""
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "basic" or not value:
        return None
    try:
        decoded = base64.b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


class BasicAuthenticator:
    """HTTP Basic authentication against a user directory."""

    def __init__(self, directory: UserDirectory) -> None:
        self.directory = directory

    async def authenticate(self, request: Request) -> RequestContext | None:
        """Authenticate the request's Basic credentials."""
        header = request.headers.get("authorization", "")
        credentials = parse_basic_authorization(header)
        if credentials is None:
            return None

        user = await self.directory.verify(*credentials)
        if user is None:
            logger.info("Rejected credentials for %s", credentials[0])
            return None
        return RequestContext(principal_id=user.id)
