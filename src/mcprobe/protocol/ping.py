"""
Liveness check via a set/get round trip.

A timestamp is stored under ``ZBX_PING`` and read back in the same request.
The server is alive only when the concatenated response lines equal the exact
bytes a healthy memcached returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from mcprobe.core.errors import TransportError
from mcprobe.transport import Session

logger = structlog.get_logger()

PING_KEY = "ZBX_PING"
PING_FLAGS = 521
PING_EXPTIME = 60

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# Upper bound on the joined response; a healthy reply is a few dozen bytes
MAX_RESPONSE_LEN = 2048


@dataclass(frozen=True)
class PingOutcome:
    """Alive/dead verdict with an optional diagnostic for callers that care."""

    alive: bool
    detail: str | None = None

    @property
    def value(self) -> int:
        return 1 if self.alive else 0

    def __bool__(self) -> bool:
        return self.alive


def make_timestamp(now: datetime | None = None) -> str:
    """Local time formatted as YYYYMMDDHHMMSS."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def build_ping_command(timestamp: str) -> bytes:
    length = len(timestamp.encode("ascii"))
    return (
        f"set {PING_KEY} {PING_FLAGS} {PING_EXPTIME} {length}\r\n"
        f"{timestamp}\r\n"
        f"get {PING_KEY}\r\n"
        "quit\r\n"
    ).encode("ascii")


def expected_ping_response(timestamp: str) -> str:
    """The STORED/VALUE/data/END lines joined with no separators."""
    length = len(timestamp.encode("ascii"))
    return "STORED" + f"VALUE {PING_KEY} {PING_FLAGS} {length}" + timestamp + "END"


def ping(session: Session, timestamp: str | None = None) -> PingOutcome:
    """
    Run the set/get round trip on an open session.

    Reads until the peer closes (``quit`` makes it do so). Transport failures
    and responses longer than MAX_RESPONSE_LEN raise ``TransportError``; a
    response mismatch is a dead outcome.
    """
    timestamp = timestamp or make_timestamp()
    session.send_command(build_ping_command(timestamp))

    parts: list[str] = []
    size = 0
    for line in session.read_lines():
        size += len(line)
        if size > MAX_RESPONSE_LEN:
            raise TransportError(
                f"Cannot read response: longer than {MAX_RESPONSE_LEN} bytes",
                details={"host": session.host, "port": session.port},
            )
        parts.append(line)

    response = "".join(parts)
    expected = expected_ping_response(timestamp)

    if response == expected:
        return PingOutcome(alive=True)

    logger.warning(
        "memcached_ping_mismatch",
        host=session.host,
        port=session.port,
        expected=expected,
        received=response,
    )
    return PingOutcome(alive=False, detail=f"unexpected response [{response}]")
