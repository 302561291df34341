"""
Caller-facing operations built on the fan-out engine.

Attributes:
    ClientConfig: Relay list, timeout, and limit defaults.
    ToolResult: ``{success, message, ...}`` envelope returned by every tool.
    query_events: Query relays with loosely typed input.
    publish_event: Publish a signed event.
    get_latest_event: Newest event of a kind by an author.
    format_event: Render one event as text.
    format_events_list: Render many events as text.
"""

from .configs import DEFAULT_RELAYS, ClientConfig
from .events import ToolResult, get_latest_event, publish_event, query_events
from .formatting import format_event, format_events_list, format_pubkey


__all__ = [
    "DEFAULT_RELAYS",
    "ClientConfig",
    "ToolResult",
    "format_event",
    "format_events_list",
    "format_pubkey",
    "get_latest_event",
    "publish_event",
    "query_events",
]
