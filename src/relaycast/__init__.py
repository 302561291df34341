r"""relaycast -- Concurrent Nostr relay fan-out for queries and publishes.

One call talks to many relays at once, each over its own short-lived
WebSocket with its own timer, answers NIP-42 authentication challenges when
a key is available, and folds the per-relay outcomes into a single result
with one diagnostic line per relay.

Imports flow strictly downward:

```text
                tools          Config defaults, NIP-19 input, messages
                  |
                fanout         Per-relay state machine and coordinators
             /    |    \
          core  nips  utils    Logging/errors/metrics, codec, transport/keys
             \    |    /
               models          Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Relay, Event, Filter, and outcome dataclasses.
    core: Exceptions, structured logging, YAML loading, metrics.
    nips: NIP-01 wire codec and NIP-42 auth events.
    utils: aiohttp WebSocket transport and nostr-sdk signing.
    fanout: [query_relays][relaycast.fanout.query.query_relays] and
        [publish_to_relays][relaycast.fanout.publish.publish_to_relays].
    tools: [query_events][relaycast.tools.events.query_events],
        [publish_event][relaycast.tools.events.publish_event], formatting.

Note:
    Top-level imports (``from relaycast import query_relays``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("relaycast")

__all__ = [
    "ClientConfig",
    "Event",
    "Filter",
    "Logger",
    "PublishResult",
    "QueryResult",
    "Relay",
    "RelayConnection",
    "RelayOutcome",
    "ToolResult",
    "get_latest_event",
    "publish_event",
    "publish_to_relays",
    "query_events",
    "query_relays",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("relaycast.core", "Logger"),
    "Event": ("relaycast.models", "Event"),
    "Filter": ("relaycast.models", "Filter"),
    "PublishResult": ("relaycast.models", "PublishResult"),
    "QueryResult": ("relaycast.models", "QueryResult"),
    "Relay": ("relaycast.models", "Relay"),
    "RelayOutcome": ("relaycast.models", "RelayOutcome"),
    "RelayConnection": ("relaycast.fanout", "RelayConnection"),
    "publish_to_relays": ("relaycast.fanout", "publish_to_relays"),
    "query_relays": ("relaycast.fanout", "query_relays"),
    "ClientConfig": ("relaycast.tools", "ClientConfig"),
    "ToolResult": ("relaycast.tools", "ToolResult"),
    "get_latest_event": ("relaycast.tools", "get_latest_event"),
    "publish_event": ("relaycast.tools", "publish_event"),
    "query_events": ("relaycast.tools", "query_events"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'relaycast' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
