"""
Query boundary for memcached probes.

Each call opens its own session, runs one protocol exchange and closes the
session on every exit path. Network failures never escape: stats queries
return a failed ``QueryResult`` and liveness checks return a dead
``PingOutcome``. No state is shared between calls, so callers may run them
from worker threads.
"""

from __future__ import annotations

from datetime import datetime

from mcprobe.core.errors import ProbeError
from mcprobe.discovery import discover
from mcprobe.endpoints import Endpoint
from mcprobe.logging import bind_context
from mcprobe.protocol.ping import PingOutcome, make_timestamp, ping
from mcprobe.protocol.stats import QueryResult, get_stat
from mcprobe.transport import Session


def query_stat(endpoint: Endpoint, key: str, timeout: float | None = 0) -> QueryResult:
    """Fetch a single statistic from ``endpoint``."""
    log = bind_context(host=endpoint.host, port=endpoint.port, key=key)
    try:
        with Session.connect(endpoint.host, endpoint.port, timeout) as session:
            result = get_stat(session, key)
    except ProbeError as e:
        log.debug("memcached_stat_failed", error=e.reason)
        return QueryResult.failure(key, e.reason)

    return result


def check_alive(
    endpoint: Endpoint,
    timeout: float | None = 0,
    now: datetime | None = None,
) -> PingOutcome:
    """Run the set/get liveness check against ``endpoint``."""
    log = bind_context(host=endpoint.host, port=endpoint.port)
    timestamp = make_timestamp(now)
    try:
        with Session.connect(endpoint.host, endpoint.port, timeout) as session:
            outcome = ping(session, timestamp)
    except ProbeError as e:
        log.debug("memcached_ping_failed", error=e.reason)
        return PingOutcome(alive=False, detail=e.reason)

    return outcome


__all__ = ["discover", "query_stat", "check_alive"]
