from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from recordsync.app import import_file, purge_held, show_held
from recordsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile import payloads with the content store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import a JSON-lines payload file")
    importer.add_argument(
        "path",
        type=Path,
        help="File with one import payload per line",
    )

    held = subparsers.add_parser("held", help="Inspect snapshots of rejected units")
    held_sub = held.add_subparsers(dest="held_command", required=True)
    held_show = held_sub.add_parser("show", help="Print a held snapshot as JSON")
    held_show.add_argument(
        "key",
        type=str,
        help="Holding key, e.g. gi_invalid_record_123",
    )
    held_sub.add_parser("purge", help="Delete expired held snapshots")

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "import":
            if not parsed_args.path.is_file():
                raise ValueError(f"No such file: {parsed_args.path}")  # noqa: TRY301
            summary = import_file(parsed_args.path)
            if not summary.ok:
                sys.exit(1)
        elif parsed_args.command == "held" and parsed_args.held_command == "show":
            snapshot = show_held(parsed_args.key)
            if snapshot is None:
                log.warning("No held snapshot under %s", parsed_args.key)
                sys.exit(1)
            sys.stdout.write(json.dumps(snapshot, indent=2, sort_keys=True) + "\n")
        elif parsed_args.command == "held" and parsed_args.held_command == "purge":
            purge_held()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
