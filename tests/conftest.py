"""
Pytest configuration and shared fixtures for relaycast tests.

Provides:
- Sample event factory with well-formed (unsigned) hex fields
- A scripted in-memory relay network usable as a ``socket_factory``
- A deterministic signer for NIP-42 flows
- Valid test keys (DO NOT USE IN PRODUCTION)
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import pytest

from relaycast.core.exceptions import ConnectivityError, SendError
from relaycast.models import Event
from relaycast.utils.keys import EventTemplate


# Valid secp256k1 test key (DO NOT USE IN PRODUCTION)
VALID_HEX_KEY = (
    "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
)

FAKE_AUTH_PUBKEY = "c" * 64
FAKE_AUTH_EVENT_ID = "e" * 64
FAKE_AUTH_SIG = "f" * 128


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Events
# ============================================================================


def build_event(n: int, created_at: int = 1_700_000_000, **overrides: Any) -> Event:
    """Well-formed event whose id is ``n`` rendered as 64-char hex."""
    data: dict[str, Any] = {
        "id": f"{n:064x}",
        "pubkey": "a" * 64,
        "created_at": created_at,
        "kind": 1,
        "tags": [],
        "content": f"note {n}",
        "sig": "b" * 128,
    }
    data.update(overrides)
    return Event.from_dict(data)


@pytest.fixture
def make_event() -> Callable[..., Event]:
    return build_event


@pytest.fixture
def sample_event() -> Event:
    return build_event(1, tags=[["t", "nostr"]])


# ============================================================================
# Signer
# ============================================================================


class FakeSigner:
    """Deterministic signer: fixed pubkey, id, and signature; records templates."""

    def __init__(self, *, fail: Exception | None = None) -> None:
        self.fail = fail
        self.templates: list[EventTemplate] = []

    def derive_public_key(self, private_key: str) -> str:
        if self.fail is not None:
            raise self.fail
        return FAKE_AUTH_PUBKEY

    def sign(self, template: EventTemplate, private_key: str) -> tuple[str, str]:
        if self.fail is not None:
            raise self.fail
        self.templates.append(template)
        return FAKE_AUTH_EVENT_ID, FAKE_AUTH_SIG


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


# ============================================================================
# Scripted relays
# ============================================================================


class FakeRelay:
    """In-memory relay speaking NIP-01/NIP-42 frames to one client at a time.

    Behaviour is scripted through constructor flags; ``handler`` runs after
    the built-in behaviour for every frame the client sends.
    """

    def __init__(
        self,
        url: str,
        *,
        events: list[Event] | None = None,
        eose: bool = True,
        close_after_events: bool = False,
        ok: tuple[bool, str] | None = (True, ""),
        challenge: str | None = None,
        require_auth: bool = False,
        reject_auth: str | None = None,
        silent: bool = False,
        fail_connect: str | None = None,
        fail_send: bool = False,
        handler: Callable[[FakeRelay, list[Any]], None] | None = None,
    ) -> None:
        self.url = url
        self.events = list(events or [])
        self.eose = eose
        self.close_after_events = close_after_events
        self.ok = ok
        self.challenge = challenge
        self.require_auth = require_auth
        self.reject_auth = reject_auth
        self.silent = silent
        self.fail_connect = fail_connect
        self.fail_send = fail_send
        self.handler = handler

        self.received: list[list[Any]] = []
        self.authenticated = False
        self.connects = 0
        self.closes = 0
        self.inbox: asyncio.Queue[str | None] = asyncio.Queue()

    # Frames pushed towards the client
    def push(self, *frame: Any) -> None:
        self.inbox.put_nowait(json.dumps(list(frame)))

    def push_raw(self, text: str) -> None:
        self.inbox.put_nowait(text)

    def close_socket(self) -> None:
        self.inbox.put_nowait(None)

    def frames(self, verb: str) -> list[list[Any]]:
        return [frame for frame in self.received if frame[0] == verb]

    def on_frame(self, frame: list[Any]) -> None:
        self.received.append(frame)
        if not self.silent:
            verb = frame[0]
            if verb == "AUTH":
                self._on_auth(frame[1])
            elif verb == "REQ":
                self._on_req(frame[1])
            elif verb == "EVENT":
                self._on_event(frame[1])
        if self.handler is not None:
            self.handler(self, frame)

    def _on_auth(self, auth_event: dict[str, Any]) -> None:
        if self.reject_auth is not None:
            self.push("OK", auth_event["id"], False, self.reject_auth)
            return
        self.authenticated = True
        self.push("OK", auth_event["id"], True, "")

    def _on_req(self, sub_id: str) -> None:
        if self.require_auth and not self.authenticated:
            self.push("CLOSED", sub_id, "auth-required: we only serve authenticated users")
            return
        for event in self.events:
            self.push("EVENT", sub_id, event.to_dict())
        if self.close_after_events:
            self.close_socket()
        elif self.eose:
            self.push("EOSE", sub_id)

    def _on_event(self, event: dict[str, Any]) -> None:
        if self.require_auth and not self.authenticated:
            self.push("OK", event["id"], False, "auth-required: publishing requires auth")
            return
        if self.ok is not None:
            self.push("OK", event["id"], self.ok[0], self.ok[1])


class FakeSocket:
    def __init__(self, relay: FakeRelay) -> None:
        self._relay = relay

    async def send(self, text: str) -> None:
        if self._relay.fail_send:
            raise SendError("broken pipe")
        self._relay.on_frame(json.loads(text))

    async def receive(self) -> str | None:
        return await self._relay.inbox.get()


class RelayNetwork:
    """Registry of [FakeRelay] instances; ``connect`` is a drop-in ``socket_factory``."""

    def __init__(self) -> None:
        self.relays: dict[str, FakeRelay] = {}

    def add(self, url: str, **kwargs: Any) -> FakeRelay:
        relay = FakeRelay(url, **kwargs)
        self.relays[url] = relay
        return relay

    @asynccontextmanager
    async def connect(self, url: str) -> AsyncIterator[FakeSocket]:
        relay = self.relays.get(url)
        if relay is None:
            raise ConnectivityError(f"connect_failed: no relay at {url}")
        if relay.fail_connect is not None:
            raise ConnectivityError(f"connect_failed: {relay.fail_connect}")
        relay.connects += 1
        if relay.challenge is not None:
            relay.push("AUTH", relay.challenge)
        try:
            yield FakeSocket(relay)
        finally:
            relay.closes += 1


@pytest.fixture
def network() -> RelayNetwork:
    return RelayNetwork()
