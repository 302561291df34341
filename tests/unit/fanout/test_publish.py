"""
Unit tests for fanout.publish module.

Tests:
- Accepted count and relay count
- Empty relay set is a successful no-op
- Rejections and timeouts reported per relay
- NIP-42 before publishing
"""

from relaycast.fanout import publish_to_relays

from conftest import FakeSigner


A = "wss://a.example"
B = "wss://b.example"


class TestPublish:
    """publish_to_relays()."""

    async def test_all_accept(self, network, sample_event):
        network.add(A)
        network.add(B)
        result = await publish_to_relays(sample_event, [A, B], socket_factory=network.connect)
        assert result.success is True
        assert result.accepted_by == 2
        assert result.relay_count == 2

    async def test_one_accepts_one_times_out(self, network, sample_event):
        network.add(A)
        network.add(B, ok=None)
        result = await publish_to_relays(
            sample_event, [A, B], timeout=0.05, socket_factory=network.connect
        )
        assert result.success is True
        assert result.accepted_by == 1
        assert result.relay_count == 2
        assert result.diagnostics == (f"{A}: ok", f"{B}: fail (timeout)")

    async def test_all_reject(self, network, sample_event):
        network.add(A, ok=(False, "blocked: spam"))
        network.add(B, ok=(False, "pow: difficulty 20 required"))
        result = await publish_to_relays(sample_event, [A, B], socket_factory=network.connect)
        assert result.success is False
        assert result.accepted_by == 0
        assert result.diagnostics == (
            f"{A}: fail (blocked: spam)",
            f"{B}: fail (pow: difficulty 20 required)",
        )

    async def test_empty_relay_set(self, network, sample_event):
        result = await publish_to_relays(sample_event, [], socket_factory=network.connect)
        assert result.success is True
        assert result.accepted_by == 0
        assert result.relay_count == 0
        assert result.to_dict()["acceptedBy"] == 0

    async def test_invalid_url_counts_as_failed_relay(self, network, sample_event):
        network.add(A)
        result = await publish_to_relays(
            sample_event, [A, "ftp://nope.example"], socket_factory=network.connect
        )
        assert result.accepted_by == 1
        assert result.relay_count == 2
        assert "invalid_url" in result.diagnostics[1]

    async def test_auth_before_publish(self, network, sample_event):
        relay = network.add(A, challenge="c", require_auth=True)
        result = await publish_to_relays(
            sample_event,
            [A],
            auth_private_key="secret",
            signer=FakeSigner(),
            socket_factory=network.connect,
        )
        assert result.success is True
        assert len(relay.frames("AUTH")) == 1

    async def test_auth_required_without_key(self, network, sample_event):
        network.add(A, require_auth=True)
        result = await publish_to_relays(sample_event, [A], socket_factory=network.connect)
        assert result.success is False
        assert result.diagnostics == (f"{A}: fail (auth_required)",)
