"""
Agent item surface for memcached monitoring.

Exposes the three item keys a monitoring agent polls:

- ``memcached.discovery`` - low-level discovery JSON of configured instances
- ``memcached.status[<host>,<port>,<stat>]`` - one stats counter
- ``memcached.ping[<host>,<port>]`` - 1 if the set/get round trip works, else 0

The host parameter is optional for both parameterised keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Union

import structlog

from mcprobe.config.loader import ProbeConfig, load_probe_config
from mcprobe.config.settings import Settings
from mcprobe.core.errors import InvalidItemError
from mcprobe.discovery import lld_json
from mcprobe.endpoints import DEFAULT_HOST, Endpoint
from mcprobe.probe import check_alive, query_stat

logger = structlog.get_logger()

INVALID_PARAMS_MESSAGE = "Invalid number of parameters"

ItemValue = Union[int, str]


@dataclass(frozen=True)
class ItemResult:
    """Value or failure message returned for one item request."""

    ok: bool
    value: ItemValue | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: ItemValue) -> ItemResult:
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, message: str) -> ItemResult:
        return cls(ok=False, message=message)


ItemHandler = Callable[[List[str]], ItemResult]


@dataclass(frozen=True)
class ItemSpec:
    """Metadata describing a registered item key."""

    key: str
    handler: ItemHandler = field(repr=False)
    has_params: bool = False
    description: str | None = None


class ItemRegistry:
    """Simple in-memory registry of item keys."""

    def __init__(self) -> None:
        self._items: Dict[str, ItemSpec] = {}

    def register(
        self,
        key: str,
        handler: ItemHandler,
        *,
        has_params: bool = False,
        description: str | None = None,
    ) -> None:
        if not key:
            raise ValueError("Item key is required")
        self._items[key] = ItemSpec(
            key=key,
            handler=handler,
            has_params=has_params,
            description=description,
        )

    def get(self, key: str) -> ItemSpec:
        spec = self._items.get(key)
        if spec is None:
            raise InvalidItemError(f"Unsupported item key [{key}]")
        return spec

    def list(self) -> List[ItemSpec]:
        return list(self._items.values())


def parse_item_key(item_key: str) -> tuple[str, list[str]]:
    """
    Split ``name[p1,"p,2",p3]`` into its name and parameters.

    Quoted parameters may contain commas and ``\\"``. Unquoted parameters are
    stripped of surrounding whitespace.

    Raises:
        InvalidItemError: On unbalanced brackets or quotes
    """
    item_key = item_key.strip()
    if "[" not in item_key:
        if "]" in item_key:
            raise InvalidItemError(f"Invalid item key format [{item_key}]")
        return item_key, []

    name, _, rest = item_key.partition("[")
    if not name or not rest.endswith("]"):
        raise InvalidItemError(f"Invalid item key format [{item_key}]")
    body = rest[:-1]

    params: list[str] = []
    i = 0
    while True:
        while i < len(body) and body[i] == " ":
            i += 1
        if i < len(body) and body[i] == '"':
            i += 1
            chars: list[str] = []
            while True:
                if i >= len(body):
                    raise InvalidItemError(f"Unterminated quoted parameter in [{item_key}]")
                if body.startswith('\\"', i):
                    chars.append('"')
                    i += 2
                    continue
                if body[i] == '"':
                    i += 1
                    break
                chars.append(body[i])
                i += 1
            while i < len(body) and body[i] == " ":
                i += 1
            if i < len(body) and body[i] != ",":
                raise InvalidItemError(f"Invalid quoted parameter in [{item_key}]")
            params.append("".join(chars))
        else:
            end = body.find(",", i)
            if end == -1:
                end = len(body)
            params.append(body[i:end].strip())
            i = end
        if i >= len(body):
            break
        i += 1

    return name, params


def _endpoint_from_params(params: list[str], extra: int) -> tuple[Endpoint, list[str]] | None:
    """Pick ``[host,] port`` off the front of params; ``extra`` trailing params follow."""
    if len(params) == 2 + extra:
        return Endpoint(host=params[0], port_text=params[1]), params[2:]
    if len(params) == 1 + extra:
        return Endpoint(host=DEFAULT_HOST, port_text=params[0]), params[1:]
    return None


class AgentModule:
    """
    Serves memcached item keys for a monitoring agent.

    Holds the loaded module configuration and the item timeout explicitly;
    nothing is kept in process-wide state.
    """

    def __init__(self, config: ProbeConfig | None = None, timeout: float = 0) -> None:
        self.config = config or ProbeConfig()
        self.timeout = timeout
        self.registry = ItemRegistry()
        self.registry.register(
            "memcached.discovery",
            self.discovery,
            description="Discover configured memcached instances",
        )
        self.registry.register(
            "memcached.status",
            self.status,
            has_params=True,
            description="Value of one memcached stats counter",
        )
        self.registry.register(
            "memcached.ping",
            self.ping,
            has_params=True,
            description="1 if memcached answers a set/get round trip, 0 otherwise",
        )

    @classmethod
    def from_settings(cls, settings: Settings, required: bool = True) -> AgentModule:
        """Load the module config named by settings, as the agent does on startup."""
        config = load_probe_config(settings.config_file, required=required)
        return cls(config=config, timeout=settings.timeout)

    def set_timeout(self, timeout: float) -> None:
        """Set the item processing timeout in seconds; 0 means transport default."""
        self.timeout = timeout

    def items(self) -> List[ItemSpec]:
        return self.registry.list()

    def discovery(self, params: list[str]) -> ItemResult:
        return ItemResult.success(lld_json(self.config.endpoints()))

    def status(self, params: list[str]) -> ItemResult:
        picked = _endpoint_from_params(params, extra=1)
        if picked is None:
            return ItemResult.fail(INVALID_PARAMS_MESSAGE)
        endpoint, (key,) = picked

        result = query_stat(endpoint, key, self.timeout)
        if result.found and result.value is not None:
            return ItemResult.success(result.value)
        return ItemResult.fail(result.message or INVALID_PARAMS_MESSAGE)

    def ping(self, params: list[str]) -> ItemResult:
        picked = _endpoint_from_params(params, extra=0)
        if picked is None:
            return ItemResult.fail(INVALID_PARAMS_MESSAGE)
        endpoint, _ = picked

        return ItemResult.success(check_alive(endpoint, self.timeout).value)

    def get(self, item_key: str) -> ItemResult:
        """Evaluate an item key such as ``memcached.status[11211,curr_items]``."""
        try:
            name, params = parse_item_key(item_key)
            spec = self.registry.get(name)
        except InvalidItemError as e:
            logger.warning("invalid_item_key", item_key=item_key, error=e.message)
            return ItemResult.fail(e.message)

        if params and not spec.has_params:
            return ItemResult.fail("Item does not allow parameters.")

        logger.debug("item_request", key=name, params=params)
        return spec.handler(params)
