"""
Stats query over the memcached text protocol.

The ``stats`` command answers with one ``STAT <name> <value>`` line per
counter followed by ``END``. Only the first statistic matching the requested
name is returned; the rest of the response is left unread.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from mcprobe.core.errors import NotFoundError, TransportError
from mcprobe.transport import Session

logger = structlog.get_logger()

STATS_COMMAND = b"stats\r\nquit\r\n"
END_SENTINEL = "END"

UINT64_MAX = 2**64 - 1

# <word> <name> <digits...>; the leading word is not checked against "STAT"
_STAT_LINE = re.compile(r"\s*\S+\s+(\S+)\s+(\d+)")


@dataclass(frozen=True)
class StatLine:
    """A single parsed ``STAT <name> <value>`` record."""

    name: str
    value: int


def parse_stat_line(line: str) -> StatLine | None:
    """
    Parse one response line.

    Lines that do not have the shape ``<word> <name> <unsigned>`` (``END``,
    ``ERROR``, blank lines) return None. Only the leading digits of the value
    are used, so ``rusage_user 0.123`` parses as 0.
    """
    match = _STAT_LINE.match(line)
    if match is None:
        return None
    value = int(match.group(2))
    if value > UINT64_MAX:
        return None
    return StatLine(name=match.group(1), value=value)


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of a stats query.

    Exactly one of: found with a value, not found, or failed with an error.
    """

    key: str
    found: bool = False
    value: int | None = None
    error: str | None = None

    @classmethod
    def hit(cls, key: str, value: int) -> QueryResult:
        return cls(key=key, found=True, value=value)

    @classmethod
    def miss(cls, key: str) -> QueryResult:
        return cls(key=key)

    @classmethod
    def failure(cls, key: str, reason: str) -> QueryResult:
        return cls(key=key, error=reason)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def message(self) -> str | None:
        """User-facing failure text, None when the value was found."""
        if self.error is not None:
            return f"Get memcached status error [{self.error}]"
        if not self.found:
            return f"Not supported key [{self.key}]"
        return None

    def raise_for_status(self) -> int:
        """Return the value or raise the matching error."""
        if self.error is not None:
            raise TransportError(self.message or self.error, details={"key": self.key})
        if not self.found or self.value is None:
            raise NotFoundError(self.message or self.key, details={"key": self.key})
        return self.value


def get_stat(session: Session, key: str) -> QueryResult:
    """
    Send ``stats`` on an open session and look up ``key``.

    Reading stops at the first matching line, at ``END``, or when the peer
    closes. Transport failures propagate as ``TransportError``.
    """
    session.send_command(STATS_COMMAND)

    for line in session.read_lines():
        if line == END_SENTINEL:
            break
        stat = parse_stat_line(line)
        if stat is None:
            continue
        if stat.name == key:
            logger.debug("memcached_stat_found", key=key, value=stat.value)
            return QueryResult.hit(key, stat.value)

    logger.warning("memcached_stat_not_found", key=key, host=session.host, port=session.port)
    return QueryResult.miss(key)
