"""Fold per-relay outcomes into aggregate results.

Pure functions over a finished set of
[RelayOutcome][relaycast.models.outcome.RelayOutcome] objects. Diagnostics
keep the order the outcomes were given in, which the coordinators make
equal to the caller's relay order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from relaycast.core.metrics import FANOUT_CALLS
from relaycast.models.event import Event
from relaycast.models.outcome import PublishResult, QueryResult, RelayOutcome


def merge_events(events: Iterable[Event]) -> list[Event]:
    """Deduplicate by ``id`` and order by ``created_at`` desc, then ``id`` desc.

    The first occurrence of an id wins. Since an id is the hash of the
    event's content, every copy is identical anyway.
    """
    unique: dict[str, Event] = {}
    for event in events:
        unique.setdefault(event.id, event)
    return sorted(unique.values(), key=lambda e: (e.created_at, e.id), reverse=True)


def aggregate_query(outcomes: Sequence[RelayOutcome], limit: int | None = None) -> QueryResult:
    """Build a [QueryResult][relaycast.models.outcome.QueryResult].

    Events buffered by every relay are merged, including relays that
    finished ``fail`` after streaming some events.

    Args:
        outcomes: One outcome per relay, in caller order.
        limit: Cap applied after merging and sorting.
    """
    events = merge_events(event for outcome in outcomes for event in outcome.events)
    if limit is not None:
        events = events[:limit]
    success = any(outcome.ok for outcome in outcomes)
    FANOUT_CALLS.labels(operation="query", success=str(success).lower()).inc()
    return QueryResult(
        success=success,
        events=tuple(events),
        diagnostics=tuple(outcome.diagnostic for outcome in outcomes),
    )


def aggregate_publish(outcomes: Sequence[RelayOutcome]) -> PublishResult:
    """Build a [PublishResult][relaycast.models.outcome.PublishResult].

    An empty relay set is a successful no-op.
    """
    accepted_by = sum(1 for outcome in outcomes if outcome.ok)
    success = accepted_by >= 1 or not outcomes
    FANOUT_CALLS.labels(operation="publish", success=str(success).lower()).inc()
    return PublishResult(
        success=success,
        accepted_by=accepted_by,
        relay_count=len(outcomes),
        diagnostics=tuple(outcome.diagnostic for outcome in outcomes),
    )
