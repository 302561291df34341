"""
Unit tests for fanout.results module.

Tests:
- merge_events(): dedupe by id, created_at desc then id desc
- aggregate_query(): success rule, limit cap, diagnostics order
- aggregate_publish(): accepted count, empty set
"""

from relaycast.fanout.results import aggregate_publish, aggregate_query, merge_events
from relaycast.models import FailureReason, RelayOutcome


class TestMergeEvents:
    """merge_events()."""

    def test_dedupes_by_id(self, make_event):
        merged = merge_events([make_event(1), make_event(1), make_event(2)])
        assert sorted(e.id for e in merged) == [make_event(1).id, make_event(2).id]

    def test_newest_first(self, make_event):
        old, new = make_event(1, created_at=100), make_event(2, created_at=200)
        assert merge_events([old, new]) == [new, old]

    def test_ties_broken_by_id_descending(self, make_event):
        a, b, c = (make_event(n, created_at=100) for n in (3, 1, 2))
        assert [e.id for e in merge_events([a, b, c])] == [
            make_event(3).id,
            make_event(2).id,
            make_event(1).id,
        ]

    def test_order_independent_of_input_order(self, make_event):
        events = [make_event(n, created_at=100 + n % 3) for n in range(1, 10)]
        assert merge_events(events) == merge_events(list(reversed(events)))

    def test_empty(self):
        assert merge_events([]) == []


class TestAggregateQuery:
    """aggregate_query()."""

    def test_success_if_any_ok(self, make_event):
        outcomes = [
            RelayOutcome("wss://a", True, (make_event(1),)),
            RelayOutcome("wss://b", False, reason=FailureReason.TIMEOUT),
        ]
        result = aggregate_query(outcomes)
        assert result.success is True
        assert result.diagnostics == ("wss://a: ok", "wss://b: fail (timeout)")

    def test_all_failed(self):
        outcomes = [
            RelayOutcome("wss://a", False, reason=FailureReason.TIMEOUT),
            RelayOutcome("wss://b", False, reason=FailureReason.TIMEOUT),
        ]
        result = aggregate_query(outcomes)
        assert result.success is False
        assert result.events == ()
        assert len(result.diagnostics) == 2

    def test_merges_across_relays(self, make_event):
        outcomes = [
            RelayOutcome("wss://a", True, (make_event(1, created_at=1), make_event(2, created_at=2))),
            RelayOutcome("wss://b", True, (make_event(2, created_at=2), make_event(3, created_at=3))),
        ]
        result = aggregate_query(outcomes)
        assert [e.id for e in result.events] == [
            make_event(3).id,
            make_event(2).id,
            make_event(1).id,
        ]

    def test_includes_events_from_failed_relays(self, make_event):
        outcomes = [
            RelayOutcome("wss://a", True),
            RelayOutcome("wss://b", False, (make_event(1),), reason="error: x"),
        ]
        assert len(aggregate_query(outcomes).events) == 1

    def test_limit_caps_after_sort(self, make_event):
        outcomes = [
            RelayOutcome("wss://a", True, tuple(make_event(n, created_at=n) for n in range(1, 6))),
        ]
        result = aggregate_query(outcomes, limit=2)
        assert [e.created_at for e in result.events] == [5, 4]

    def test_empty(self):
        result = aggregate_query([])
        assert result.success is False
        assert result.diagnostics == ()


class TestAggregatePublish:
    """aggregate_publish()."""

    def test_partial(self):
        outcomes = [
            RelayOutcome("wss://a", True),
            RelayOutcome("wss://b", False, reason=FailureReason.TIMEOUT),
        ]
        result = aggregate_publish(outcomes)
        assert result.success is True
        assert result.accepted_by == 1
        assert result.relay_count == 2
        assert result.diagnostics == ("wss://a: ok", "wss://b: fail (timeout)")

    def test_none_accepted(self):
        result = aggregate_publish([RelayOutcome("wss://a", False, reason="blocked: spam")])
        assert result.success is False
        assert result.accepted_by == 0
        assert result.relay_count == 1

    def test_empty_is_success(self):
        result = aggregate_publish([])
        assert result.success is True
        assert result.accepted_by == 0
        assert result.relay_count == 0
        assert result.diagnostics == ()
