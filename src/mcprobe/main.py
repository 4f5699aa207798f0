"""
mcprobe command line entry point.

Usage:
    mcprobe <command> [args]

Settings come from MCPROBE_* environment variables (see config.settings);
command line flags override them.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

import structlog

from mcprobe.cli.discover import handle_discover_command, register_discover_parser
from mcprobe.cli.items import handle_get_command, items_command, register_item_parsers
from mcprobe.cli.query import (
    handle_ping_command,
    handle_stat_command,
    register_query_parsers,
)
from mcprobe.config.settings import get_settings
from mcprobe.logging import configure_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcprobe", description="memcached monitoring probe")
    parser.add_argument("--log-level", help="Log level (default: MCPROBE_LOG_LEVEL or WARNING)")
    parser.add_argument(
        "--log-format", choices=["json", "console"], help="Log renderer (default: json)"
    )
    subparsers = parser.add_subparsers(dest="command")

    register_discover_parser(subparsers)
    register_query_parsers(subparsers)
    register_item_parsers(subparsers)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(
        level=args.log_level or settings.log_level,
        fmt=args.log_format or settings.log_format,
    )

    if args.command == "discover":
        if args.config_file is None:
            args.config_file = settings.config_file
        sys.exit(handle_discover_command(args))

    if args.command == "stat":
        exit_code = handle_stat_command(
            args, default_timeout=settings.timeout, default_host=settings.default_host
        )
        sys.exit(exit_code)

    if args.command == "ping":
        exit_code = handle_ping_command(
            args, default_timeout=settings.timeout, default_host=settings.default_host
        )
        sys.exit(exit_code)

    if args.command == "get":
        if args.config_file is None:
            args.config_file = settings.config_file
        sys.exit(handle_get_command(args, default_timeout=settings.timeout))

    if args.command == "items":
        sys.exit(items_command())

    parser.print_help()
    sys.exit(2)


if __name__ == "__main__":
    main()
