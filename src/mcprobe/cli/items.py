"""
CLI commands for the agent item surface.

Commands:
    mcprobe get 'memcached.status[11211,curr_items]'  - Evaluate an item key
    mcprobe items                                     - List supported item keys
"""

from __future__ import annotations

import argparse

from mcprobe.agent import AgentModule
from mcprobe.cli.ux import console, error, print_table
from mcprobe.config.loader import load_probe_config
from mcprobe.core.errors import ExitCode, main_with_error_handling


@main_with_error_handling()
def get_command(item_key: str, config_file: str | None = None, timeout: float = 0) -> int:
    """
    Evaluate one item key and print its value.

    The module config is only needed for discovery, so a missing file is not
    an error here.
    """
    config = load_probe_config(config_file, required=False)
    module = AgentModule(config=config, timeout=timeout)

    result = module.get(item_key)
    if not result.ok:
        error(result.message or "Item failed")
        return ExitCode.VALIDATION_ERROR

    console.print(str(result.value), markup=False, highlight=False, soft_wrap=True)
    return ExitCode.SUCCESS


@main_with_error_handling()
def items_command() -> int:
    """List the supported item keys."""
    module = AgentModule()
    rows = [
        [spec.key, "yes" if spec.has_params else "no", spec.description or ""]
        for spec in module.items()
    ]
    print_table("Item keys", ["Key", "Parameters", "Description"], rows)
    return ExitCode.SUCCESS


def register_item_parsers(subparsers: argparse._SubParsersAction) -> None:
    get_parser = subparsers.add_parser("get", help="Evaluate an agent item key")
    get_parser.add_argument("item_key", help="Item key, e.g. memcached.ping[11211]")
    get_parser.add_argument("--config", dest="config_file", help="Module config file path")
    get_parser.add_argument(
        "--timeout", type=float, default=None, help="Timeout in seconds (0 = default)"
    )

    subparsers.add_parser("items", help="List supported item keys")


def handle_get_command(args: argparse.Namespace, default_timeout: float = 0) -> int:
    return get_command(
        item_key=args.item_key,
        config_file=args.config_file,
        timeout=args.timeout if args.timeout is not None else default_timeout,
    )
