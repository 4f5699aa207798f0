"""
CLI commands that query a memcached instance.

Commands:
    mcprobe stat <key> [--host H] [--port P]  - Print one stats counter
    mcprobe ping [--host H] [--port P]        - Print 1 (alive) or 0 (dead)
"""

from __future__ import annotations

import argparse

from mcprobe.cli.ux import console, error, info
from mcprobe.core.errors import ExitCode, main_with_error_handling
from mcprobe.endpoints import DEFAULT_HOST, Endpoint
from mcprobe.probe import check_alive, query_stat

DEFAULT_PORT = 11211


@main_with_error_handling()
def stat_command(
    key: str,
    host: str = DEFAULT_HOST,
    port: str | int = DEFAULT_PORT,
    timeout: float = 0,
) -> int:
    """
    Print the value of one stats counter.

    Exit codes:
        0 - Counter found
        1 - Counter not present in the stats response
        11 - Connect or transport failure
    """
    endpoint = Endpoint(host=host, port_text=str(port))
    result = query_stat(endpoint, key, timeout)

    if result.found:
        console.print(str(result.value), markup=False, highlight=False)
        return ExitCode.SUCCESS

    error(result.message or key)
    if result.failed:
        return ExitCode.PROVIDER_ERROR
    return ExitCode.NOT_FOUND


@main_with_error_handling()
def ping_command(
    host: str = DEFAULT_HOST,
    port: str | int = DEFAULT_PORT,
    timeout: float = 0,
    verbose: bool = False,
) -> int:
    """Print 1 if the instance is alive, 0 otherwise. Always exits 0."""
    endpoint = Endpoint(host=host, port_text=str(port))
    outcome = check_alive(endpoint, timeout)

    console.print(str(outcome.value), markup=False, highlight=False)
    if verbose and outcome.detail:
        info(outcome.detail)
    return ExitCode.SUCCESS


def register_query_parsers(subparsers: argparse._SubParsersAction) -> None:
    stat_parser = subparsers.add_parser("stat", help="Read one memcached stats counter")
    stat_parser.add_argument("key", help="Statistic name, e.g. curr_items")
    _add_endpoint_args(stat_parser)

    ping_parser = subparsers.add_parser("ping", help="Check memcached with a set/get round trip")
    _add_endpoint_args(ping_parser)
    ping_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show why a ping reported dead"
    )


def _add_endpoint_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default=None, help="memcached host (default: 127.0.0.1)")
    parser.add_argument("--port", default=str(DEFAULT_PORT), help="memcached port")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Timeout in seconds (0 = default)"
    )


def handle_stat_command(
    args: argparse.Namespace,
    default_timeout: float = 0,
    default_host: str = DEFAULT_HOST,
) -> int:
    return stat_command(
        key=args.key,
        host=args.host or default_host,
        port=args.port,
        timeout=args.timeout if args.timeout is not None else default_timeout,
    )


def handle_ping_command(
    args: argparse.Namespace,
    default_timeout: float = 0,
    default_host: str = DEFAULT_HOST,
) -> int:
    return ping_command(
        host=args.host or default_host,
        port=args.port,
        timeout=args.timeout if args.timeout is not None else default_timeout,
        verbose=args.verbose,
    )
