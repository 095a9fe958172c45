"""
Command-line interface for Sigcheck.

Argument parsing, logging setup and dispatch.  Subcommands live in ``check``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ...config import get_settings
from ...constants import ENV_LOG_LEVEL, ENV_VALIDATION_TIME, __version__
from ...core.crypto import DefaultCryptoBackend
from ...errors import ConfigError
from .check import cmd_check, cmd_info

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigcheck",
        description="Verify CMS signatures embedded in PDF documents.",
        epilog=(
            "Environment variables:\n"
            f"  {ENV_VALIDATION_TIME}  ISO-8601 moment for certificate validity\n"
            f"  {ENV_LOG_LEVEL}        Log level (DEBUG, INFO, WARNING, ERROR)\n"
            "\n"
            "Settings may also be stored in ~/.sigcheck/config.json.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"sigcheck {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show per-check details and debug logging",
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # check
    p_check = sub.add_parser("check", help="Check embedded PDF signature(s)")
    p_check.add_argument("pdf", help="Signed PDF file")
    p_check.add_argument(
        "--all",
        action="store_true",
        default=False,
        help="Check every signature field instead of only the last one",
    )

    # info
    p_info = sub.add_parser("info", help="Show certificates embedded in the signature(s)")
    p_info.add_argument("pdf", help="Signed PDF file")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format=_LOG_FORMAT)

    backend = DefaultCryptoBackend(settings.validation_time)

    if args.command == "check":
        cmd_check(args, backend)
    elif args.command == "info":
        cmd_info(args, backend)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
