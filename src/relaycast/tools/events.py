"""Caller-facing query and publish operations.

Thin adapters over [relaycast.fanout][] that accept loosely typed input
(NIP-19 identifiers, plain dicts for events and tag filters), apply
[ClientConfig][relaycast.tools.configs.ClientConfig] defaults, and return a
[ToolResult][relaycast.tools.events.ToolResult] carrying a human-readable
message. Input problems are reported as ``success=False`` results rather
than raised.

Examples:
    ```python
    result = await query_events(kinds=[1], authors=["npub1..."], limit=10)
    print(result.message)  # "Found 10 events."
    ```
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from relaycast.core.logger import Logger
from relaycast.fanout.publish import publish_to_relays
from relaycast.fanout.query import query_relays
from relaycast.models.event import Event
from relaycast.models.filter import Filter
from relaycast.utils.keys import Signer, normalize_event_id, normalize_public_key
from relaycast.utils.transport import SocketFactory, open_relay_socket

from .configs import MAX_QUERY_LIMIT, ClientConfig


_TAG_KEY = re.compile(r"[a-zA-Z0-9]")

logger = Logger("tools.events")


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of a tool call.

    Attributes:
        success: Whether the operation succeeded.
        message: Summary suitable for showing to a user.
        events: Matching events (queries only).
        accepted_by: Relays that accepted the event (publishes only).
        relay_count: Relays the event was sent to (publishes only).
        diagnostics: One ``"<relay>: ok|fail (<reason>)"`` line per relay.
    """

    success: bool
    message: str
    events: tuple[Event, ...] | None = None
    accepted_by: int | None = None
    relay_count: int | None = None
    diagnostics: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dict, omitting fields that do not apply."""
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.events is not None:
            result["events"] = [event.to_dict() for event in self.events]
        if self.accepted_by is not None:
            result["acceptedBy"] = self.accepted_by
        if self.relay_count is not None:
            result["relayCount"] = self.relay_count
        if self.diagnostics:
            result["diagnostics"] = list(self.diagnostics)
        return result


def _failure_details(diagnostics: Sequence[str]) -> str:
    return "\n\nResults:\n" + "\n".join(diagnostics)


async def query_events(  # noqa: PLR0913
    relays: Iterable[str] | None = None,
    *,
    kinds: Iterable[int] | None = None,
    authors: Iterable[str] | None = None,
    ids: Iterable[str] | None = None,
    since: int | None = None,
    until: int | None = None,
    limit: int | None = None,
    tags: Mapping[str, Iterable[str]] | None = None,
    search: str | None = None,
    auth_private_key: str | None = None,
    config: ClientConfig | None = None,
    signer: Signer | None = None,
    socket_factory: SocketFactory = open_relay_socket,
) -> ToolResult:
    """Query relays for events matching the given constraints.

    Args:
        relays: Relays to query; falls back to ``config.relays`` when empty.
        kinds: Event kinds.
        authors: Authors as hex, ``npub1``, or ``nprofile1``.
        ids: Event ids as hex, ``note1``, or ``nevent1``.
        since: Lower ``created_at`` bound (unix seconds).
        until: Upper ``created_at`` bound (unix seconds).
        limit: Maximum number of events (1..200); defaults to ``config.query_limit``.
        tags: Single-letter tag filters, e.g. ``{"t": ["nostr"]}``.
        search: NIP-50 search string (relay support varies).
        auth_private_key: Key for NIP-42; defaults to ``config.auth_key``.
        config: Defaults; a fresh [ClientConfig][relaycast.tools.configs.ClientConfig]
            when omitted.
        signer: Signing collaborator for NIP-42.
        socket_factory: WebSocket opener.
    """
    config = config or ClientConfig()
    relay_list = list(relays or ()) or list(config.relays)
    limit = config.query_limit if limit is None else limit
    if not 1 <= limit <= MAX_QUERY_LIMIT:
        return ToolResult(False, f"Limit must be between 1 and {MAX_QUERY_LIMIT}.")

    author_list: tuple[str, ...] | None = None
    if authors:
        raw_authors = list(authors)
        normalized = [normalize_public_key(a) for a in raw_authors]
        if any(a is None for a in normalized):
            return ToolResult(
                False,
                "One or more author identifiers are invalid (expected hex pubkey, npub, or nprofile).",
            )
        author_list = tuple(a for a in normalized if a is not None)

    id_list: tuple[str, ...] | None = None
    if ids:
        raw_ids = list(ids)
        normalized = [normalize_event_id(i) for i in raw_ids]
        if any(i is None for i in normalized):
            return ToolResult(
                False,
                "One or more event identifiers are invalid (expected 64-hex id, note, or nevent).",
            )
        id_list = tuple(i for i in normalized if i is not None)

    tag_filters: dict[str, Iterable[str]] = {}
    for raw_key, values in (tags or {}).items():
        key = str(raw_key).strip()
        if not _TAG_KEY.fullmatch(key):
            return ToolResult(False, f'Invalid tag filter key "{key}".')
        # Filter rejects a bare str, so values are passed through as given
        tag_filters[key] = values

    kind_list = tuple(kinds) if kinds else None
    try:
        event_filter = Filter(
            kinds=kind_list,
            authors=author_list,
            ids=id_list,
            since=since,
            until=until,
            limit=limit,
            tags=tag_filters,
            search=search or None,
        )
    except (ValueError, TypeError) as e:
        return ToolResult(False, f"Invalid filter: {e}")

    result = await query_relays(
        relay_list,
        event_filter,
        timeout=config.timeout,
        auth_private_key=auth_private_key or config.auth_key,
        signer=signer,
        socket_factory=socket_factory,
    )
    if not result.success:
        logger.warning("query_failed", relays=len(relay_list))
        return ToolResult(
            False,
            "Error querying events: all relays failed." + _failure_details(result.diagnostics),
            diagnostics=result.diagnostics,
        )

    return ToolResult(
        True,
        f"Found {len(result.events)} events.",
        events=result.events,
        diagnostics=result.diagnostics,
    )


async def publish_event(
    signed_event: Event | Mapping[str, Any],
    relays: Iterable[str] | None = None,
    *,
    auth_private_key: str | None = None,
    config: ClientConfig | None = None,
    signer: Signer | None = None,
    socket_factory: SocketFactory = open_relay_socket,
) -> ToolResult:
    """Publish an already-signed event.

    ``relays=None`` uses ``config.relays``; an explicit empty list publishes
    nowhere and succeeds.
    """
    config = config or ClientConfig()
    try:
        event = (
            signed_event if isinstance(signed_event, Event) else Event.from_dict(signed_event)
        )
    except (ValueError, TypeError) as e:
        return ToolResult(False, f"Invalid event: {e}")

    relay_list = list(config.relays) if relays is None else list(relays)
    result = await publish_to_relays(
        event,
        relay_list,
        timeout=config.timeout,
        auth_private_key=auth_private_key or config.auth_key,
        signer=signer,
        socket_factory=socket_factory,
    )

    if result.relay_count == 0:
        message = "No relays specified; nothing was published."
    elif result.success:
        message = f"Event published to {result.accepted_by}/{result.relay_count} relays."
    else:
        message = "Failed to publish event to any relay." + _failure_details(result.diagnostics)

    return ToolResult(
        result.success,
        message,
        accepted_by=result.accepted_by,
        relay_count=result.relay_count,
        diagnostics=result.diagnostics,
    )


async def get_latest_event(
    relays: Iterable[str],
    kind: int,
    author: str,
    auth_private_key: str | None = None,
    *,
    config: ClientConfig | None = None,
    signer: Signer | None = None,
    socket_factory: SocketFactory = open_relay_socket,
) -> Event | None:
    """Return the newest event of *kind* by *author*, or ``None``.

    Intended for replaceable events (profiles, contact lists, relay lists)
    where only the most recent version matters.

    Raises:
        ValueError: If *author* is not a recognizable public key.
    """
    pubkey = normalize_public_key(author)
    if pubkey is None:
        raise ValueError(f"Invalid author identifier: {author!r}")

    config = config or ClientConfig()
    result = await query_relays(
        list(relays) or list(config.relays),
        Filter(kinds=(kind,), authors=(pubkey,), limit=1),
        timeout=config.timeout,
        auth_private_key=auth_private_key or config.auth_key,
        signer=signer,
        socket_factory=socket_factory,
    )
    return result.events[0] if result.events else None
