"""CalDAV server application."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response as StarletteResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from .auth import Authenticator, RequestContext
from .caldav import (
    handle_delete,
    handle_discovery,
    handle_get,
    handle_mkcol,
    handle_propfind,
    handle_put,
    handle_report,
)
from .caldav.paths import CALENDAR_HOME_PATH
from .internal import AuthenticationError, HTTPError, NotFoundError, ValidationError
from .internal.server import serve_error
from .store import CalendarStore

logger = logging.getLogger(__name__)

WELL_KNOWN_CALDAV_PATH = "/.well-known/caldav"
NEW_CALENDAR_PATHS = ("/calendars/new", "/calendars/new/")

CALENDAR_ALLOW = "GET, HEAD, PUT, DELETE"
DISCOVERY_ALLOW = "GET, HEAD"

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PROPFIND", "REPORT", "MKCOL"]
CORS_HEADERS = ["Authorization", "Content-Type", "Accept", "Depth", "Prefer"]


class Handler:
    """CalDAV HTTP handler.

    Instances are ASGI applications so that a single route can accept every
    HTTP method, including the WebDAV extension verbs.
    """

    def __init__(
        self,
        store: CalendarStore,
        authenticator: Authenticator,
        realm: str = "py-caldav",
        debug: bool = False,
    ):
        """Initialize handler.

        Args:
            store: Calendar storage backend
            authenticator: Resolves requests to principals
            realm: Realm announced in Basic authentication challenges
            debug: Enable debug logging of request and response bodies
        """
        self.store = store
        self.authenticator = authenticator
        self.realm = realm
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    async def handle(self, request: Request) -> StarletteResponse:
        """Handle a CalDAV HTTP request.

        Args:
            request: Starlette request

        Returns:
            Starlette response
        """
        if self.debug:
            from .debug import log_request

            # request.body() can only be consumed once from the wire
            request_body = await request.body()
            log_request(
                request.method,
                request.url.path,
                dict(request.headers.items()),
                request_body,
            )

            async def receive():
                return {"type": "http.request", "body": request_body}

            request = Request(scope=request.scope, receive=receive)

        try:
            response = await self._dispatch(request)
        except HTTPError as err:
            if err.code >= 500:
                logger.error("%s %s failed: %s", request.method, request.url.path, err)
            response = serve_error(err, realm=self.realm)
        except Exception as err:
            logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
            response = serve_error(err, realm=self.realm)

        logger.info("%s %s -> %d", request.method, request.url.path, response.status_code)
        if self.debug:
            self._log_response(response)
        return response

    async def _authenticate(self, request: Request) -> RequestContext:
        ctx = await self.authenticator.authenticate(request)
        if ctx is None:
            raise AuthenticationError("Authentication required")
        return ctx

    async def _dispatch(self, request: Request) -> StarletteResponse:
        method = request.method
        path = request.url.path

        if path == WELL_KNOWN_CALDAV_PATH:
            if method not in ("GET", "HEAD"):
                return _method_not_allowed(DISCOVERY_ALLOW)
            return await handle_discovery()

        ctx = await self._authenticate(request)

        if path in ("/calendars", CALENDAR_HOME_PATH):
            if method == "REPORT":
                return await handle_report(ctx, self.store, await request.body())
            return await handle_propfind(ctx, self.store)

        if path in NEW_CALENDAR_PATHS and method == "MKCOL":
            return await handle_mkcol(ctx, self.store, await request.body())

        if path.startswith(CALENDAR_HOME_PATH):
            if method in ("GET", "HEAD"):
                return await handle_get(ctx, self.store, path)
            if method == "PUT":
                return await handle_put(ctx, self.store, path, await _read_text(request))
            if method == "DELETE":
                return await handle_delete(ctx, self.store, path)
            return _method_not_allowed(CALENDAR_ALLOW)

        raise NotFoundError("Not found")

    def _log_response(self, response: StarletteResponse) -> None:
        from .debug import log_response

        log_response(response.status_code, dict(response.headers.items()), response.body)


async def _read_text(request: Request) -> str:
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("request body is not valid UTF-8") from e


def _method_not_allowed(allow: str) -> StarletteResponse:
    return JSONResponse(
        content={"error": "Method not allowed", "status": 405},
        status_code=405,
        headers={"Allow": allow},
    )


async def health(request: Request) -> JSONResponse:
    """Report liveness."""
    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
        }
    )


def create_app(
    store: CalendarStore,
    authenticator: Authenticator,
    realm: str = "py-caldav",
    debug: bool = False,
) -> Starlette:
    """Create the CalDAV Starlette application.

    Args:
        store: Calendar storage backend
        authenticator: Resolves requests to principals
        realm: Realm announced in Basic authentication challenges
        debug: Enable debug logging of request and response bodies

    Returns:
        Starlette application
    """
    handler = Handler(store, authenticator, realm=realm, debug=debug)

    return Starlette(
        debug=debug,
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/{path:path}", endpoint=handler),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=CORS_METHODS,
                allow_headers=CORS_HEADERS,
            ),
        ],
    )
