"""Command-line maintenance for the chat database."""
from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from fiction_chat.core.errors import ChatError
from fiction_chat.core.logging import configure_logging
from fiction_chat.core.settings import settings
from fiction_chat.db.session import SessionLocal, create_tables
from fiction_chat.services.admin import reset_chat
from fiction_chat.services.user_sync import sync_users


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain the Fiction Chat database")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-tables", help="Create any missing chat tables.")
    sub.add_parser("sync-users", help="Mirror users from the configured host table.")

    reset = sub.add_parser("reset", help="Delete ALL chat data and restart id sequences.")
    reset.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the irreversible reset.",
    )
    reset.add_argument(
        "--no-resync",
        action="store_true",
        help="Skip re-importing users after the reset.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    if args.command == "create-tables":
        create_tables()
        print("[manage] chat tables ready")
        return 0

    if args.command == "reset" and not args.yes:
        print("[manage] refusing to reset without --yes", file=sys.stderr)
        return 2

    try:
        with SessionLocal() as db:
            if args.command == "sync-users":
                count = sync_users(db)
                print(f"[manage] synced {count} users")
            else:
                count = reset_chat(db, resync=not args.no_resync)
                print(f"[manage] chat reset; re-imported {count} users")
    except ChatError as exc:
        print(f"[manage] ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
