"""
Endpoint parsing for memcached instance lists.

Turns a ``memcached_inst_ports`` value such as ``"11211, 10.0.0.5:11212"``
into immutable ``Endpoint`` values. Parsing never fails: unusable port text
survives as ``port_text`` and resolves to port ``0``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_HOST = "127.0.0.1"

# Characters stripped from both ends of a token, as the agent config parser does
TRIM_CHARS = "\t \r\n"

_LEADING_DIGITS = re.compile(r"[ \t\n\r\f\v]*([+-]?)(\d+)")


def port_from_text(text: str) -> int:
    """
    Convert port text to an integer the way ``atoi`` would.

    Leading whitespace and an optional sign are accepted, parsing stops at the
    first non-digit. Text without leading digits, and values outside
    1-65535, yield 0.
    """
    match = _LEADING_DIGITS.match(text)
    if match is None:
        return 0
    value = int(match.group(2))
    if match.group(1) == "-":
        value = -value
    if not 1 <= value <= 65535:
        return 0
    return value


@dataclass(frozen=True)
class Endpoint:
    """A (host, port) pair identifying one memcached instance."""

    host: str
    port_text: str

    @property
    def port(self) -> int:
        return port_from_text(self.port_text)

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port_text}"

    @classmethod
    def local(cls, port: int | str) -> Endpoint:
        """Endpoint on the default host."""
        return cls(host=DEFAULT_HOST, port_text=str(port))


def parse_endpoint(token: str) -> Endpoint:
    """Parse a single ``host:port`` or bare ``port`` token."""
    if ":" not in token:
        return Endpoint(host=DEFAULT_HOST, port_text=token.strip(TRIM_CHARS))

    host, _, port_text = token.partition(":")
    host = host.strip(TRIM_CHARS)
    trimmed_port = port_text.strip(TRIM_CHARS)

    if trimmed_port:
        return Endpoint(host=host, port_text=trimmed_port)

    # "host:" with nothing usable after the colon keeps the raw segment
    return Endpoint(host=DEFAULT_HOST, port_text=port_text)


def parse_endpoints(config: str | None) -> list[Endpoint]:
    """
    Parse a comma-separated list of endpoints.

    Empty or absent input yields an empty list. Empty tokens between
    consecutive commas are skipped.
    """
    if not config:
        return []

    return [parse_endpoint(token) for token in config.split(",") if token]
