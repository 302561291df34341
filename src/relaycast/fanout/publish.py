"""Publish fan-out coordinator.

Sends one signed event to every relay concurrently and counts how many of
them accepted it. The event is forwarded as-is; its signature is never
re-checked locally.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from relaycast.core.logger import Logger
from relaycast.models.constants import ConnectionMode
from relaycast.models.event import Event
from relaycast.models.outcome import PublishResult, RelayOutcome
from relaycast.utils.keys import Signer
from relaycast.utils.transport import SocketFactory, open_relay_socket

from ._relays import plan_relays
from .connection import DEFAULT_TIMEOUT, RelayConnection
from .results import aggregate_publish


_logger = Logger("fanout.publish")


async def publish_to_relays(
    event: Event,
    relays: Iterable[str],
    *,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
    auth_private_key: str | None = None,
    signer: Signer | None = None,
    socket_factory: SocketFactory = open_relay_socket,
) -> PublishResult:
    """Send *event* to every relay and wait for each ``OK``.

    Returns:
        A [PublishResult][relaycast.models.outcome.PublishResult].
        ``success`` is true iff at least one relay answered ``OK true``;
        an empty relay set is a successful no-op that opens no socket.
    """
    planned = plan_relays(relays)
    tasks: dict[str, asyncio.Task[RelayOutcome]] = {}

    async with asyncio.TaskGroup() as tg:
        for entry in planned:
            if isinstance(entry, RelayOutcome):
                continue
            connection = RelayConnection(
                entry,
                ConnectionMode.PUBLISH,
                event=event,
                timeout=timeout,
                auth_private_key=auth_private_key,
                signer=signer,
                socket_factory=socket_factory,
            )
            tasks[entry] = tg.create_task(connection.run())

    outcomes = [
        entry if isinstance(entry, RelayOutcome) else tasks[entry].result() for entry in planned
    ]
    result = aggregate_publish(outcomes)
    _logger.info(
        "publish_completed",
        event_id=event.id,
        accepted_by=result.accepted_by,
        relays=result.relay_count,
        success=result.success,
    )
    return result
