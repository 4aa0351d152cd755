"""Tests for error types and error responses."""

import json

from py_caldav.internal import (
    AuthenticationError,
    ForbiddenError,
    HTTPError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
    http_error_from_error,
)
from py_caldav.internal.server import serve_error


def test_error_codes():
    """Test the status code of each error kind."""
    assert ValidationError("bad").code == 400
    assert InvalidIdentifierError("x").code == 400
    assert AuthenticationError().code == 401
    assert ForbiddenError("nope").code == 401
    assert NotFoundError("gone").code == 404


def test_invalid_identifier_is_validation_error():
    """Test that identifier errors are validation errors."""
    err = InvalidIdentifierError("abc")

    assert isinstance(err, ValidationError)
    assert err.message == "invalid identifier 'abc'"


def test_http_error_str():
    """Test HTTPError string formatting."""
    assert str(HTTPError(404)) == "404 Not Found"
    assert str(NotFoundError("Calendar not found")) == "404 Not Found: Calendar not found"
    assert HTTPError(404).message == "Not Found"


def test_http_error_from_error():
    """Test converting arbitrary errors to HTTP errors."""
    assert http_error_from_error(None) is None

    err = NotFoundError("x")
    assert http_error_from_error(err) is err

    converted = http_error_from_error(RuntimeError("boom"))
    assert converted.code == 500


def test_serve_error_body():
    """Test the JSON error body."""
    response = serve_error(NotFoundError("Event not found"))

    assert response.status_code == 404
    assert json.loads(response.body) == {"error": "Event not found", "status": 404}
    assert "www-authenticate" not in response.headers


def test_serve_error_authentication_challenge():
    """Test that authentication errors carry a Basic challenge."""
    response = serve_error(AuthenticationError("Authentication required"), realm="test")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == 'Basic realm="test"'


def test_serve_error_forbidden_has_no_challenge():
    """Test that ownership failures do not ask for credentials."""
    response = serve_error(ForbiddenError("You don't own this calendar"))

    assert response.status_code == 401
    assert "www-authenticate" not in response.headers
    assert json.loads(response.body)["error"] == "You don't own this calendar"


def test_serve_error_hides_internal_details():
    """Test that unexpected errors do not leak their message."""
    response = serve_error(RuntimeError("database password is hunter2"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "Internal server error", "status": 500}
