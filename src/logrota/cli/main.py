"""
Command-line interface for logrota.

Configuration comes from the ``LOG_*`` environment, the same way a script
using :func:`logrota.get_logger` would see it::

    LOG_FILE=/var/log/job.log logrota status
    LOG_FILE=/var/log/job.log logrota rotate
    logrota size 10M
    LOG_FILE=/var/log/job.log logrota emit 1 "nightly run finished"
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from ..core.errors import ConfigurationError, FatalLogEmitted, InvalidSizeFormat
from ..core.levels import parse_level
from ..core.logger import Logger
from ..core.settings import load_settings
from ..core.sizes import parse_size
from ..rotation.executor import RotationStatus


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logrota", description="Buffered rotating log files for scripts"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show rotation settings and file sizes")
    sub.add_parser("rotate", help="Rotate the active log file now")
    sub.add_parser("flush", help="Flush buffered records (no-op for a fresh process)")

    size = sub.add_parser("size", help="Convert a size string such as 10M to bytes")
    size.add_argument("text")

    emit = sub.add_parser("emit", help="Write one record")
    emit.add_argument("level", help="0-4 or DEBUG/INFO/WARN/ERROR/FATAL")
    emit.add_argument("message", nargs="+")
    return parser


def _make_logger() -> Logger:
    return Logger(load_settings(), console=False)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "size":
        try:
            print(parse_size(args.text))
        except InvalidSizeFormat as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        return 0

    try:
        logger = _make_logger()
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    try:
        if args.command == "status":
            print(logger.rotation_status())
        elif args.command == "rotate":
            result = logger.rotate_now()
            if result is None:
                print("Log file output disabled", file=sys.stderr)
                return 1
            if result.status is RotationStatus.FAILED:
                print("Rotation failed", file=sys.stderr)
                return 1
            if result.path is not None:
                print(result.path)
            else:
                print(result.status.value)
        elif args.command == "flush":
            if not logger.flush():
                return 1
        elif args.command == "emit":
            try:
                level = parse_level(args.level)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
            if not logger.log(level, " ".join(args.message)):
                return 1
    except FatalLogEmitted:
        return 1
    finally:
        logger.close()
    return 0


def cli_main() -> int:
    """Console-script entry point."""
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())
