"""NIP-01 wire codec.

Pure, stateless serialization of the client-to-relay frames relaycast sends
and parsing of the relay-to-client frames it understands. Every frame is a
JSON array whose first element is a verb:

```text
client -> relay   ["REQ", <sub_id>, <filter>]   ["CLOSE", <sub_id>]
                  ["EVENT", <event>]            ["AUTH", <auth_event>]
relay -> client   ["EVENT", <sub_id>, <event>]  ["EOSE", <sub_id>]
                  ["OK", <event_id>, <bool>, <message>]
                  ["AUTH", <challenge>]         ["CLOSED", <sub_id>, <message>]
                  ["NOTICE", <message>]
```

See Also:
    [relaycast.fanout.connection][]: The state machine consuming decoded frames.
    [relaycast.nips.nip42][]: Builds the event carried by ``AUTH`` frames.
"""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from typing import Any

from relaycast.core.exceptions import ProtocolError
from relaycast.models.event import Event
from relaycast.models.filter import Filter


SUBSCRIPTION_PREFIX = "relaycast-"


# =============================================================================
# Incoming message types
# =============================================================================


@dataclass(frozen=True, slots=True)
class EventMessage:
    """``["EVENT", <sub_id>, <event>]`` -- a stored or live event for a subscription."""

    subscription_id: str
    event: Event


@dataclass(frozen=True, slots=True)
class EoseMessage:
    """``["EOSE", <sub_id>]`` -- end of stored events."""

    subscription_id: str


@dataclass(frozen=True, slots=True)
class OkMessage:
    """``["OK", <event_id>, <accepted>, <message>]`` -- result of an ``EVENT`` or ``AUTH``."""

    event_id: str
    accepted: bool
    message: str | None = None


@dataclass(frozen=True, slots=True)
class AuthMessage:
    """``["AUTH", <challenge>]`` -- NIP-42 authentication challenge."""

    challenge: str


@dataclass(frozen=True, slots=True)
class ClosedMessage:
    """``["CLOSED", <sub_id>, <message>]`` -- relay-side subscription termination."""

    subscription_id: str
    message: str | None = None


@dataclass(frozen=True, slots=True)
class NoticeMessage:
    """``["NOTICE", <message>]`` -- human-readable relay notice."""

    message: str


RelayMessage = (
    EventMessage | EoseMessage | OkMessage | AuthMessage | ClosedMessage | NoticeMessage
)


# =============================================================================
# Encoding
# =============================================================================


def _dumps(frame: list[Any]) -> str:
    return json.dumps(frame, ensure_ascii=False, separators=(",", ":"))


def new_subscription_id() -> str:
    """Return a fresh random subscription id (``relaycast-<8 hex>``)."""
    return f"{SUBSCRIPTION_PREFIX}{secrets.token_hex(4)}"


def encode_req(subscription_id: str, event_filter: Filter) -> str:
    """Encode ``["REQ", <sub_id>, <filter>]``."""
    return _dumps(["REQ", subscription_id, event_filter.to_dict()])


def encode_close(subscription_id: str) -> str:
    """Encode ``["CLOSE", <sub_id>]``."""
    return _dumps(["CLOSE", subscription_id])


def encode_event(event: Event) -> str:
    """Encode ``["EVENT", <event>]`` for publishing."""
    return _dumps(["EVENT", event.to_dict()])


def encode_auth(auth_event: Event) -> str:
    """Encode ``["AUTH", <signed auth event>]`` (NIP-42)."""
    return _dumps(["AUTH", auth_event.to_dict()])


# =============================================================================
# Decoding
# =============================================================================


def _expect_str(frame: list[Any], index: int, verb: str) -> str:
    if len(frame) <= index or not isinstance(frame[index], str):
        raise ProtocolError(f"{verb} frame: element {index} must be a string")
    return frame[index]


def _optional_str(frame: list[Any], index: int) -> str | None:
    if len(frame) > index and isinstance(frame[index], str):
        return frame[index]
    return None


def decode_message(raw: str | bytes) -> RelayMessage:
    """Decode one relay-to-client frame.

    Args:
        raw: Text (or UTF-8 bytes) payload of a WebSocket message.

    Returns:
        The typed message for the frame's verb.

    Raises:
        ProtocolError: If the payload is not JSON, not an array, has an
            unknown verb, or carries mistyped elements (including an
            ``EVENT`` whose event object fails validation).
    """
    try:
        frame = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise ProtocolError(f"Frame is not valid JSON: {e}") from e

    if not isinstance(frame, list) or not frame or not isinstance(frame[0], str):
        raise ProtocolError("Frame must be a JSON array starting with a verb")

    verb = frame[0]

    if verb == "EVENT":
        subscription_id = _expect_str(frame, 1, verb)
        if len(frame) < 3:
            raise ProtocolError("EVENT frame: missing event object")
        try:
            event = Event.from_dict(frame[2])
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"EVENT frame: invalid event: {e}") from e
        return EventMessage(subscription_id, event)

    if verb == "EOSE":
        return EoseMessage(_expect_str(frame, 1, verb))

    if verb == "OK":
        event_id = _expect_str(frame, 1, verb)
        if len(frame) < 3 or not isinstance(frame[2], bool):
            raise ProtocolError("OK frame: element 2 must be a boolean")
        return OkMessage(event_id, frame[2], _optional_str(frame, 3))

    if verb == "AUTH":
        return AuthMessage(_expect_str(frame, 1, verb))

    if verb == "CLOSED":
        return ClosedMessage(_expect_str(frame, 1, verb), _optional_str(frame, 2))

    if verb == "NOTICE":
        return NoticeMessage(_expect_str(frame, 1, verb))

    raise ProtocolError(f"Unknown verb: {verb!r}")
