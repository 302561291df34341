"""
Unit tests for models.relay module.

Tests:
- Scheme and host normalization
- Default port stripping, explicit port retention
- Path normalization (trailing and duplicate slashes)
- Rejection of non-WebSocket schemes, queries, fragments, null bytes
- Immutability
"""

import pytest

from relaycast.models import Relay


class TestNormalization:
    """URL normalization."""

    def test_lowercases_scheme_and_host(self):
        relay = Relay("WSS://Relay.Damus.IO")
        assert relay.url == "wss://relay.damus.io"
        assert relay.scheme == "wss"
        assert relay.host == "relay.damus.io"

    def test_strips_trailing_slash(self):
        assert Relay("wss://nos.lol/").url == "wss://nos.lol"

    def test_strips_default_wss_port(self):
        relay = Relay("wss://nos.lol:443")
        assert relay.url == "wss://nos.lol"
        assert relay.port is None

    def test_strips_default_ws_port(self):
        assert Relay("ws://localhost:80").url == "ws://localhost"

    def test_keeps_explicit_port(self):
        relay = Relay("ws://localhost:7777")
        assert relay.url == "ws://localhost:7777"
        assert relay.port == 7777

    def test_keeps_scheme_as_given(self):
        assert Relay("ws://relay.example.com").scheme == "ws"

    def test_collapses_duplicate_slashes_in_path(self):
        relay = Relay("wss://relay.example.com//nostr//")
        assert relay.url == "wss://relay.example.com/nostr"
        assert relay.path == "/nostr"

    def test_strips_surrounding_whitespace(self):
        assert Relay("  wss://nos.lol  ").url == "wss://nos.lol"

    def test_ipv6_host(self):
        relay = Relay("ws://[::1]:7777")
        assert relay.host == "::1"
        assert relay.url == "ws://[::1]:7777"

    def test_equivalent_inputs_are_equal_urls(self):
        assert Relay("wss://NOS.lol/").url == Relay("wss://nos.lol:443").url

    def test_str_is_url(self):
        assert str(Relay("wss://nos.lol/")) == "wss://nos.lol"


class TestRejection:
    """Invalid URLs raise ValueError."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://relay.example.com",
            "http://relay.example.com",
            "relay.example.com",
            "",
            "wss://relay.example.com/?x=1",
            "wss://relay.example.com/#frag",
            "wss://relay\x00.example.com",
        ],
    )
    def test_invalid(self, url):
        with pytest.raises(ValueError):
            Relay(url)

    def test_non_string(self):
        with pytest.raises(ValueError, match="must be a str"):
            Relay(123)  # type: ignore[arg-type]


class TestImmutability:
    """Frozen dataclass behavior."""

    def test_cannot_set_url(self):
        relay = Relay("wss://nos.lol")
        with pytest.raises(AttributeError):
            relay.url = "wss://other.example"  # type: ignore[misc]
