"""Server configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .auth import UserDirectory

logger = logging.getLogger(__name__)

DEV_USER_EMAIL = "dev@localhost"
DEV_USER_PASSWORD = "dev"

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigError(Exception):
    """Invalid or incomplete configuration."""


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


@dataclass
class ServerConfig:
    """Configuration for the CalDAV server.

    Credentials are never defaulted: either a users file is supplied or
    insecure dev mode is switched on explicitly.
    """

    host: str = "127.0.0.1"
    port: int = 8080
    data_dir: Path = Path("./data")
    users_file: Path | None = None
    realm: str = "py-caldav"
    insecure_dev: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a configuration from ``CALDAV_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("CALDAV_HOST"):
            config.host = env["CALDAV_HOST"]
        if env.get("CALDAV_PORT"):
            try:
                config.port = int(env["CALDAV_PORT"])
            except ValueError as e:
                raise ConfigError(f"CALDAV_PORT must be an integer: {env['CALDAV_PORT']!r}") from e
        if env.get("CALDAV_DATA_DIR"):
            config.data_dir = Path(env["CALDAV_DATA_DIR"])
        if env.get("CALDAV_USERS_FILE"):
            config.users_file = Path(env["CALDAV_USERS_FILE"])
        if env.get("CALDAV_REALM"):
            config.realm = env["CALDAV_REALM"]
        config.insecure_dev = _env_flag(env.get("CALDAV_INSECURE_DEV"))
        config.debug = _env_flag(env.get("CALDAV_DEBUG"))
        return config

    def validate(self) -> None:
        """Check the configuration before the server starts.

        Raises:
            ConfigError: If the configuration is unusable
        """
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")
        if self.users_file is None:
            if not self.insecure_dev:
                raise ConfigError(
                    "no users file configured; set CALDAV_USERS_FILE "
                    "or enable insecure dev mode explicitly"
                )
        elif not self.users_file.is_file():
            raise ConfigError(f"users file does not exist: {self.users_file}")

    def load_users(self) -> UserDirectory:
        """Load the user directory this configuration points at."""
        self.validate()
        if self.users_file is not None:
            directory = UserDirectory.load(self.users_file)
            if len(directory) == 0 and not self.insecure_dev:
                raise ConfigError(f"users file has no users: {self.users_file}")
            return directory

        logger.warning(
            "INSECURE DEV MODE: seeding login %s with a well-known password",
            DEV_USER_EMAIL,
        )
        directory = UserDirectory()
        directory.add_user(DEV_USER_EMAIL, DEV_USER_PASSWORD, name="Developer")
        return directory
