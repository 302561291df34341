"""
Prometheus metrics for relay fan-out calls.

Module-level metric objects (singletons, thread-safe) recorded by
[relaycast.fanout][relaycast.fanout]. relaycast is a library with no
long-running process of its own, so it does not serve ``/metrics``; an
embedding application exposes the default registry however it already does.

Architecture:
    RELAY_OUTCOMES:            Terminal per-relay outcomes by operation and result.
    RELAY_CONNECTION_SECONDS:  Lifetime of one relay connection (connect to teardown).
    FANOUT_CALLS:              Coordinator invocations by operation and overall result.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram


RELAY_OUTCOMES = Counter(
    "relaycast_relay_outcomes",
    "Terminal per-relay outcomes",
    ["operation", "result"],
)

RELAY_CONNECTION_SECONDS = Histogram(
    "relaycast_relay_connection_seconds",
    "Lifetime of one relay connection in seconds",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 4, 8, 15, 30, 60),
)

FANOUT_CALLS = Counter(
    "relaycast_fanout_calls",
    "Coordinator invocations by overall result",
    ["operation", "success"],
)


def outcome_label(ok: bool, reason: str | None) -> str:
    """Collapse a per-relay reason into a bounded metric label.

    Relay-supplied rejection texts are unbounded, so anything that is not
    one of the built-in reasons is reported as ``rejected``.
    """
    if ok:
        return "ok"
    if reason is None:
        return "unknown"
    head = reason.split(":", 1)[0]
    if head in {
        "timeout",
        "send_failed",
        "auth_required",
        "auth_failed",
        "closed",
        "closed_no_events",
        "invalid_url",
        "connect_failed",
    }:
        return head
    return "rejected"
