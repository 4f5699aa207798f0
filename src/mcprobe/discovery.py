"""
Discovery payloads for the endpoints a probe watches.

``format_endpoints`` emits the neutral ``{"host", "port"}`` shape.
``to_lld`` wraps the same list in the agent's low-level discovery document,
which names the fields ``{#MCHOST}`` and ``{#MCPORT}``.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from mcprobe.endpoints import Endpoint, parse_endpoints

LLD_HOST_MACRO = "{#MCHOST}"
LLD_PORT_MACRO = "{#MCPORT}"


def format_endpoints(endpoints: Iterable[Endpoint]) -> list[dict[str, Any]]:
    """One object per endpoint, in parse order."""
    return [{"host": endpoint.host, "port": endpoint.port} for endpoint in endpoints]


def to_lld(endpoints: Iterable[Endpoint]) -> dict[str, list[dict[str, str]]]:
    """Low-level discovery document; ports are kept as configured text."""
    return {
        "data": [
            {LLD_HOST_MACRO: endpoint.host, LLD_PORT_MACRO: endpoint.port_text}
            for endpoint in endpoints
        ]
    }


def lld_json(endpoints: Iterable[Endpoint]) -> str:
    return json.dumps(to_lld(endpoints), separators=(",", ":"))


def discover(config: str | None) -> list[dict[str, Any]]:
    """Parse a ``memcached_inst_ports`` value and format it for discovery."""
    return format_endpoints(parse_endpoints(config))
