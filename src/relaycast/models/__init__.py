"""Pure frozen dataclasses with zero I/O for relays, events, filters, and outcomes.

The models layer is the foundation of the package. It has **no dependencies**
on any other relaycast package. Every model uses
``@dataclass(frozen=True, slots=True)`` for immutability, and all validation
happens in ``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    Relay: Validated ``ws://``/``wss://`` relay URL with RFC 3986 parsing.
    Event: Immutable signed Nostr event (NIP-01 wire shape).
    Filter: Immutable NIP-01 subscription filter.
    RelayOutcome: Terminal outcome of one relay connection.
    QueryResult: Aggregate result of a fan-out query.
    PublishResult: Aggregate result of a fan-out publish.

See Also:
    [relaycast.fanout][relaycast.fanout]: Produces outcomes and results.
    [relaycast.nips][relaycast.nips]: Wire codec consuming these models.
"""

from .constants import (
    EVENT_KIND_MAX,
    ConnectionMode,
    ConnectionState,
    EventKind,
    FailureReason,
)
from .event import Event
from .filter import Filter
from .outcome import PublishResult, QueryResult, RelayOutcome
from .relay import Relay


__all__ = [
    "EVENT_KIND_MAX",
    "ConnectionMode",
    "ConnectionState",
    "Event",
    "EventKind",
    "FailureReason",
    "Filter",
    "PublishResult",
    "QueryResult",
    "Relay",
    "RelayOutcome",
]
