"""
Per-relay outcomes and aggregate results.

A [RelayOutcome][relaycast.models.outcome.RelayOutcome] is emitted exactly
once by each relay connection and never mutated afterwards. The
coordinators fold a set of outcomes into a
[QueryResult][relaycast.models.outcome.QueryResult] or
[PublishResult][relaycast.models.outcome.PublishResult] whose
``diagnostics`` enumerate every relay, so a caller can tell a partial
outage from a total one.

See Also:
    [relaycast.fanout.results][]: Aggregation functions producing the results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .event import Event


@dataclass(frozen=True, slots=True)
class RelayOutcome:
    """Terminal result of one relay connection.

    Attributes:
        relay: Relay URL the outcome belongs to.
        ok: Whether the relay completed the operation successfully.
        events: Events buffered in query mode (always empty for publish).
        reason: Failure reason, or a success qualifier such as ``closed``.
    """

    relay: str
    ok: bool
    events: tuple[Event, ...] = ()
    reason: str | None = None

    @property
    def diagnostic(self) -> str:
        """Human-readable line: ``"<relay>: ok"`` or ``"<relay>: fail (<reason>)"``."""
        if self.ok:
            return f"{self.relay}: ok"
        return f"{self.relay}: fail ({self.reason or 'unknown'})"


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Aggregate outcome of a fan-out query.

    Attributes:
        success: ``True`` iff at least one relay finished ``ok``.
        events: Deduplicated events ordered by ``created_at`` desc, then ``id`` desc.
        diagnostics: One line per relay, in input order.
    """

    success: bool
    events: tuple[Event, ...] = ()
    diagnostics: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "events": [event.to_dict() for event in self.events],
            "diagnostics": list(self.diagnostics),
        }


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Aggregate outcome of a fan-out publish.

    Attributes:
        success: ``True`` iff ``accepted_by >= 1``, or the relay set was empty.
        accepted_by: Number of relays that answered ``OK true`` for the event.
        relay_count: Number of relays the event was sent to.
        diagnostics: One line per relay, in input order.
    """

    success: bool
    accepted_by: int
    relay_count: int
    diagnostics: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "acceptedBy": self.accepted_by,
            "relayCount": self.relay_count,
            "diagnostics": list(self.diagnostics),
        }
