"""Operator commands for item versions.

Examples:
  post-version versions 42 -v
  post-version hide 42 1
  post-version unhide 42 1
  post-version delete 42 1 --yes
  post-version serve --port 8000
"""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn
from sqlalchemy.orm import Session

from .core.config import settings
from .core.logging_config import setup_logging
from .database import SessionLocal, init_db
from .exceptions import PostVersionError
from .models import Item, ItemStatus, HIDDEN_STATUS
from .services import OptionsService, QuerySelection, VersionResolver, VersionService
from .services.status_service import status_label

logger = logging.getLogger(__name__)

INDENT = " " * 4


class CommandError(Exception):
    """Aborts a command with an ``Error:`` line and exit code 1."""


def _parse_int(value: str, what: str) -> int:
    if not value.strip().isdecimal():
        raise CommandError(f"{what} must be numeric.")
    return int(value)


def _require_item(db: Session, options: OptionsService, raw_id: str) -> Item:
    item_id = _parse_int(raw_id, "Item ID")
    item = db.query(Item).filter(Item.id == item_id).first()
    if item is None:
        raise CommandError("Item does not exist.")
    if item.is_snapshot or not options.is_versioned(item.item_type):
        raise CommandError(f"Item type '{item.item_type}' is not versionable.")
    return item


def cmd_versions(db: Session, args: argparse.Namespace) -> str:
    options = OptionsService(db)
    item = _require_item(db, options, args.item_id)
    resolver = VersionResolver(db, options=options)

    entries = list(resolver.list_versions(item.id, include_hidden=True).values())
    if item.status == ItemStatus.UNRELEASED.value:
        entries.insert(0, item)

    print("Versions:")
    for entry in entries:
        row = entry if isinstance(entry, Item) else entry.item
        record = resolver.record_for(row)
        if record is None:
            continue
        print(f"- {record.label} ({record.version_number}) : {record.status.value}")
        if not args.verbose:
            continue
        print(f"{INDENT}Item ID: {row.id}")
        print(f"{INDENT}Item status: {status_label(row.status)}")
        print(f"{INDENT}URL: {QuerySelection.version_permalink(item, record.version_number)}")
        print(f"{INDENT}Last modified on: {row.modified_at}")
    return ""


def cmd_hide(db: Session, args: argparse.Namespace) -> str:
    options = OptionsService(db)
    item = _require_item(db, options, args.item_id)
    number = _parse_int(args.version, "Version value")
    service = VersionService(db, options=options)

    version = service.resolver.get_version(item.id, number, include_hidden=True)
    if version is None:
        raise CommandError("Version does not exist.")
    if version.status == HIDDEN_STATUS:
        raise CommandError("Version is already hidden.")

    if not service.hide_version(item.id, number):
        raise CommandError(f"Version {number} failed to be hidden.")
    return f"Version {number} hidden."


def cmd_unhide(db: Session, args: argparse.Namespace) -> str:
    options = OptionsService(db)
    item = _require_item(db, options, args.item_id)
    number = _parse_int(args.version, "Version value")
    service = VersionService(db, options=options)

    version = service.resolver.get_version(item.id, number, include_hidden=True)
    if version is None:
        raise CommandError("Version does not exist.")
    if version.status == ItemStatus.PUBLISHED.value:
        raise CommandError("Version is already live.")

    if not service.unhide_version(item.id, number):
        raise CommandError(f"Version {number} failed to be unhidden.")
    return f"Version {number} unhidden."


def cmd_delete(db: Session, args: argparse.Namespace) -> str:
    options = OptionsService(db)
    item = _require_item(db, options, args.item_id)
    number = _parse_int(args.version, "Version value")
    service = VersionService(db, options=options)

    version = service.resolver.get_version(item.id, number, include_hidden=True)
    if version is None:
        raise CommandError("Version does not exist.")

    if not args.yes:
        answer = input(
            f"Are you sure you want to delete version {number} with the label "
            f"'{version.record.label}'? This action cannot be undone. [y/n] "
        )
        if answer.strip().lower() not in ("y", "yes"):
            raise CommandError("Aborted.")

    result = service.delete_version(item.id, number)
    if not result:
        raise CommandError(f"Version {number} failed to be deleted: {result.message}")
    return f"Version {number} deleted."


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API."""
    uvicorn.run("postversion.main:app", host=args.host, port=args.port, reload=args.reload, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="post-version",
        description="Inspect and manage item versions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n", 1)[1],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    versions = subparsers.add_parser("versions", help="List the versions of an item")
    versions.add_argument("item_id", help="ID of the item")
    versions.add_argument("-v", "--verbose", action="store_true", help="Show details of each version")
    versions.set_defaults(handler=cmd_versions)

    for name, handler, help_text in (
        ("hide", cmd_hide, "Hide a version"),
        ("unhide", cmd_unhide, "Make a hidden version live again"),
        ("delete", cmd_delete, "Delete a version permanently"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("item_id", help="ID of the item")
        sub.add_argument("version", help="Number of the version")
        if name == "delete":
            sub.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
        sub.set_defaults(handler=handler)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes")

    return parser


def main(argv: Optional[List[str]] = None, db: Optional[Session] = None) -> int:
    """Entry point of the ``post-version`` command. Returns the exit code."""
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return cmd_serve(args)

    own_session = db is None
    if own_session:
        setup_logging(log_level=settings.log_level, log_format="text")
        init_db()
        db = SessionLocal()

    try:
        message = args.handler(db, args)
    except CommandError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PostVersionError as e:
        logger.error("Command %s failed: %s", args.command, e.message, extra={"details": e.details})
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        if own_session:
            db.close()

    if message:
        print(f"Success: {message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
