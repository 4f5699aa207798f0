"""
CLI commands for mcprobe.
"""

from mcprobe.cli.discover import discover_command
from mcprobe.cli.items import get_command, items_command
from mcprobe.cli.query import ping_command, stat_command

__all__ = [
    "discover_command",
    "stat_command",
    "ping_command",
    "get_command",
    "items_command",
]
