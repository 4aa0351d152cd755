"""Error types shared by the CalDAV handlers and the HTTP layer."""

from __future__ import annotations


class HTTPError(Exception):
    """HTTP error with status code."""

    def __init__(self, code: int, err: Exception | str | None = None):
        self.code = code
        self.err = err
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Short human-readable description without the status prefix."""
        if self.err:
            return str(self.err)
        return self.phrase

    @property
    def phrase(self) -> str:
        from http import HTTPStatus

        try:
            return HTTPStatus(self.code).phrase
        except ValueError:
            return "Unknown"

    def __str__(self) -> str:
        s = f"{self.code} {self.phrase}"
        if self.err:
            return f"{s}: {self.err}"
        return s


class ValidationError(HTTPError):
    """Malformed path, iCalendar body or datetime value."""

    def __init__(self, err: Exception | str | None = None):
        super().__init__(400, err)


class InvalidIdentifierError(ValidationError):
    """A path segment that should hold an identifier is not a UUID."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid identifier {value!r}")


class AuthenticationError(HTTPError):
    """Missing or invalid credentials."""

    def __init__(self, err: Exception | str | None = None):
        super().__init__(401, err)


class ForbiddenError(HTTPError):
    """The principal is authenticated but may not touch the resource.

    Reported with the same status as :class:`AuthenticationError` so clients
    observe the same behaviour, but without a credentials challenge.
    """

    def __init__(self, err: Exception | str | None = None):
        super().__init__(401, err)


class NotFoundError(HTTPError):
    """Referenced calendar or event does not exist."""

    def __init__(self, err: Exception | str | None = None):
        super().__init__(404, err)


def http_error_from_error(err: Exception | None) -> HTTPError | None:
    """Convert an error to an HTTPError."""
    if err is None:
        return None
    if isinstance(err, HTTPError):
        return err
    return HTTPError(500, err)

