"""Query fan-out coordinator.

Opens one [RelayConnection][relaycast.fanout.connection.RelayConnection]
per relay, runs them concurrently in an ``asyncio.TaskGroup``, and waits for
every one of them to finish. There is no global deadline: the call returns
as soon as the slowest relay reaches a terminal state, which is bounded by
the per-relay ``timeout``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from relaycast.core.logger import Logger
from relaycast.models.constants import ConnectionMode
from relaycast.models.filter import Filter
from relaycast.models.outcome import QueryResult, RelayOutcome
from relaycast.utils.keys import Signer
from relaycast.utils.transport import SocketFactory, open_relay_socket

from ._relays import plan_relays
from .connection import DEFAULT_TIMEOUT, RelayConnection
from .results import aggregate_query


_logger = Logger("fanout.query")


async def query_relays(
    relays: Iterable[str],
    event_filter: Filter,
    *,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
    auth_private_key: str | None = None,
    signer: Signer | None = None,
    socket_factory: SocketFactory = open_relay_socket,
) -> QueryResult:
    """Send *event_filter* to every relay and merge what comes back.

    Args:
        relays: Relay URLs. Duplicates (after normalization) are contacted once.
        event_filter: The filter sent in each ``REQ``.
        timeout: Per-relay budget in seconds.
        auth_private_key: Key used to answer NIP-42 challenges, if any.
        signer: Signing collaborator for the auth event.
        socket_factory: WebSocket opener (tests inject a fake).

    Returns:
        A [QueryResult][relaycast.models.outcome.QueryResult] that is
        successful iff at least one relay finished ``ok``. Individual relay
        failures are reported in ``diagnostics`` and never raised.
    """
    planned = plan_relays(relays)
    tasks: dict[str, asyncio.Task[RelayOutcome]] = {}

    async with asyncio.TaskGroup() as tg:
        for entry in planned:
            if isinstance(entry, RelayOutcome):
                continue
            connection = RelayConnection(
                entry,
                ConnectionMode.QUERY,
                event_filter=event_filter,
                timeout=timeout,
                auth_private_key=auth_private_key,
                signer=signer,
                socket_factory=socket_factory,
            )
            tasks[entry] = tg.create_task(connection.run())

    outcomes = [
        entry if isinstance(entry, RelayOutcome) else tasks[entry].result() for entry in planned
    ]
    result = aggregate_query(outcomes, event_filter.limit)
    _logger.info(
        "query_completed",
        relays=len(outcomes),
        ok=sum(1 for outcome in outcomes if outcome.ok),
        events=len(result.events),
        success=result.success,
    )
    return result
