"""
Unit tests for core.metrics module.

Tests:
- Module-level metric objects and their types
- outcome_label() collapsing of reasons into bounded labels
"""

import pytest
from prometheus_client import Counter, Histogram

from relaycast.core.metrics import (
    FANOUT_CALLS,
    RELAY_CONNECTION_SECONDS,
    RELAY_OUTCOMES,
    outcome_label,
)


class TestMetricObjects:
    """Module-level metrics."""

    def test_types(self):
        assert isinstance(RELAY_OUTCOMES, Counter)
        assert isinstance(FANOUT_CALLS, Counter)
        assert isinstance(RELAY_CONNECTION_SECONDS, Histogram)

    def test_outcome_counter_increments(self):
        child = RELAY_OUTCOMES.labels(operation="query", result="timeout")
        before = child._value.get()
        child.inc()
        assert child._value.get() == before + 1


class TestOutcomeLabel:
    """outcome_label()."""

    def test_ok(self):
        assert outcome_label(True, "closed") == "ok"

    def test_none_reason(self):
        assert outcome_label(False, None) == "unknown"

    @pytest.mark.parametrize(
        ("reason", "label"),
        [
            ("timeout", "timeout"),
            ("auth_required", "auth_required"),
            ("auth_failed: restricted", "auth_failed"),
            ("send_failed: broken pipe", "send_failed"),
            ("connect_failed: Cannot connect to host", "connect_failed"),
            ("closed_no_events", "closed_no_events"),
            ("invalid_url: Invalid scheme", "invalid_url"),
        ],
    )
    def test_known_reasons(self, reason, label):
        assert outcome_label(False, reason) == label

    @pytest.mark.parametrize("reason", ["blocked: spam", "rate-limited: slow down", "pow: 20"])
    def test_relay_messages_collapse(self, reason):
        assert outcome_label(False, reason) == "rejected"
