"""User management command-line tool."""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``py-caldav-useradd``."""
    parser = argparse.ArgumentParser(
        description="Add a user to a CalDAV users file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Add a user, prompting for the password
  py-caldav-useradd --users-file users.json alice@example.com

  # Add a user and give them a first calendar
  py-caldav-useradd --users-file users.json --data-dir ./data \\
      --calendar "Work" alice@example.com
        """,
    )
    parser.add_argument("email", help="login email address")
    parser.add_argument(
        "--users-file",
        type=Path,
        required=True,
        help="JSON users file (created if missing)",
    )
    parser.add_argument("--name", default="", help="display name")
    parser.add_argument("--data-dir", type=Path, help="calendar data directory")
    parser.add_argument("--calendar", help="create a calendar with this name for the user")
    return parser


def main() -> None:
    """Main entry point for adding users."""
    args = build_parser().parse_args()

    if args.calendar and args.data_dir is None:
        print("Error: --calendar requires --data-dir", file=sys.stderr)
        sys.exit(1)

    from py_caldav.auth import UserDirectory

    if args.users_file.exists():
        directory = UserDirectory.load(args.users_file)
    else:
        directory = UserDirectory()

    if directory.get(args.email) is not None:
        print(f"Error: user already exists: {args.email}", file=sys.stderr)
        sys.exit(1)

    password = getpass.getpass(f"Password for {args.email}: ")
    if not password:
        print("Error: password must not be empty", file=sys.stderr)
        sys.exit(1)
    if getpass.getpass("Repeat password: ") != password:
        print("Error: passwords do not match", file=sys.stderr)
        sys.exit(1)

    user = directory.add_user(args.email, password, name=args.name)
    directory.save(args.users_file)
    print(f"Added user {user.email} ({user.id})")

    if args.calendar:
        from py_caldav.models import NewCalendar
        from py_caldav.store import LocalCalendarStore

        store = LocalCalendarStore(args.data_dir)
        calendar = asyncio.run(store.create_calendar(user.id, NewCalendar(name=args.calendar)))
        print(f"Created calendar {calendar.name!r}: /calendars/{calendar.id}/")


if __name__ == "__main__":
    main()
