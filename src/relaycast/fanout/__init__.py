"""
Concurrent fan-out of queries and publishes across many relays.

Each relay gets its own
[RelayConnection][relaycast.fanout.connection.RelayConnection] with its own
timer; the coordinators wait for every connection to reach a terminal state
and fold the outcomes with [relaycast.fanout.results][].

Examples:
    ```python
    from relaycast.fanout import query_relays
    from relaycast.models import Filter

    result = await query_relays(
        ["wss://relay.damus.io", "wss://nos.lol"],
        Filter(kinds=(1,), limit=10),
    )
    for line in result.diagnostics:
        print(line)
    ```
"""

from .connection import DEFAULT_TIMEOUT, RelayConnection
from .publish import publish_to_relays
from .query import query_relays
from .results import aggregate_publish, aggregate_query, merge_events


__all__ = [
    "DEFAULT_TIMEOUT",
    "RelayConnection",
    "aggregate_publish",
    "aggregate_query",
    "merge_events",
    "publish_to_relays",
    "query_relays",
]
