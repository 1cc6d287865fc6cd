"""Command-line entry point.

Usage:
    cli-updater check     # print a notice to stderr if an update exists
    cli-updater apply     # install the latest published version
"""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from cli_updater import __version__
from cli_updater.checker import check_for_updates
from cli_updater.installer import UpdateFailedError, apply_update
from cli_updater.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli-updater",
        description="Check for and install updates of a command-line tool.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Print a notice if a newer version is published")
    sub.add_parser("apply", help="Install the latest published version")
    return parser


async def _check() -> int:
    notice = await check_for_updates()
    if notice:
        print(notice, file=sys.stderr)
    return 0


async def _apply() -> int:
    log = get_logger("cli_updater.main")
    try:
        await apply_update()
    except UpdateFailedError as exc:
        print(str(exc), file=sys.stderr)
        return exc.exit_code
    except OSError as exc:
        log.error("update_install_error", error=str(exc))
        print(f"Update failed: {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    try:
        setup_logging()
    except ValidationError as exc:
        print(f"Invalid update settings: {exc}", file=sys.stderr)
        # check stays best-effort even when configuration is invalid
        return 0 if args.command == "check" else 1
    if args.command == "check":
        return asyncio.run(_check())
    return asyncio.run(_apply())


if __name__ == "__main__":
    sys.exit(main())
