"""memcached text protocol: stats lookup and set/get liveness check."""

from mcprobe.protocol.ping import (
    PingOutcome,
    build_ping_command,
    expected_ping_response,
    make_timestamp,
    ping,
)
from mcprobe.protocol.stats import (
    STATS_COMMAND,
    QueryResult,
    StatLine,
    get_stat,
    parse_stat_line,
)

__all__ = [
    "STATS_COMMAND",
    "StatLine",
    "QueryResult",
    "parse_stat_line",
    "get_stat",
    "PingOutcome",
    "make_timestamp",
    "build_ping_command",
    "expected_ping_response",
    "ping",
]
