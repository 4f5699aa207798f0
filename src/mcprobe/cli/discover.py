"""
CLI command for endpoint discovery.

Commands:
    mcprobe discover                        - Discover from the module config file
    mcprobe discover --ports 11211,h:11212  - Discover from an explicit list
    mcprobe discover --lld                  - Emit the agent LLD document
"""

from __future__ import annotations

import argparse
import json

from mcprobe.cli.ux import console
from mcprobe.config.loader import load_probe_config
from mcprobe.core.errors import main_with_error_handling
from mcprobe.discovery import format_endpoints, lld_json
from mcprobe.endpoints import parse_endpoints


@main_with_error_handling()
def discover_command(
    config_file: str | None = None,
    ports: str | None = None,
    lld: bool = False,
) -> int:
    """
    Print the discovered endpoints as JSON.

    ``ports`` takes precedence over the config file. Without either, the
    default module config file must exist and define the instance list.
    """
    if ports is not None:
        endpoints = parse_endpoints(ports)
    else:
        endpoints = load_probe_config(config_file, required=True).endpoints()

    if lld:
        console.print(lld_json(endpoints), markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(
            json.dumps(format_endpoints(endpoints)),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    return 0


def register_discover_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("discover", help="List configured memcached instances")
    parser.add_argument("--config", dest="config_file", help="Module config file path")
    parser.add_argument("--ports", help="Comma-separated [host:]port list (overrides config)")
    parser.add_argument("--lld", action="store_true", help="Emit low-level discovery JSON")


def handle_discover_command(args: argparse.Namespace) -> int:
    return discover_command(
        config_file=args.config_file,
        ports=args.ports,
        lld=args.lld,
    )
