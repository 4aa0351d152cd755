"""CalDAV server command-line tool."""

import argparse
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``py-caldav-server``."""
    parser = argparse.ArgumentParser(
        description="CalDAV calendar server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start server with a users file
  py-caldav-server --users-file users.json --data-dir ./data

  # Start a throwaway server with a well-known dev login (dev@localhost / dev)
  py-caldav-server --insecure-dev

Every option can also be set through CALDAV_* environment variables;
command-line options take precedence.

Endpoints:
  - Discovery: http://localhost:PORT/.well-known/caldav
  - Calendars: http://localhost:PORT/calendars/
  - Health:    http://localhost:PORT/health
        """,
    )
    parser.add_argument("--addr", help="listening address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, help="listening port (default: 8080)")
    parser.add_argument("--data-dir", type=Path, help="directory holding calendar data")
    parser.add_argument("--users-file", type=Path, help="JSON file with user accounts")
    parser.add_argument("--realm", help="Basic authentication realm")
    parser.add_argument(
        "--insecure-dev",
        action="store_true",
        default=None,
        help="allow running without a users file by seeding a well-known dev login",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="enable debug logging (logs request/response bodies with formatted XML)",
    )
    return parser


def main() -> None:
    """Main entry point for the CalDAV server."""
    args = build_parser().parse_args()

    from py_caldav.config import ConfigError, ServerConfig

    try:
        config = ServerConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.addr is not None:
        config.host = args.addr
    if args.port is not None:
        config.port = args.port
    if args.data_dir is not None:
        config.data_dir = args.data_dir
    if args.users_file is not None:
        config.users_file = args.users_file
    if args.realm is not None:
        config.realm = args.realm
    if args.insecure_dev:
        config.insecure_dev = True
    if args.debug:
        config.debug = True

    from py_caldav.debug import setup_logging

    setup_logging(debug=config.debug)

    try:
        directory = config.load_users()
    except (ConfigError, OSError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    from py_caldav.auth import BasicAuthenticator
    from py_caldav.server import create_app
    from py_caldav.store import LocalCalendarStore

    store = LocalCalendarStore(config.data_dir.resolve())
    app = create_app(
        store,
        BasicAuthenticator(directory),
        realm=config.realm,
        debug=config.debug,
    )

    import uvicorn

    print(f"CalDAV server listening on {config.host}:{config.port}")
    print(f"Data directory: {store.root_dir}")
    print(f"Discovery: http://{config.host}:{config.port}/.well-known/caldav")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
