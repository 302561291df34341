"""Shared constants for the models layer.

Defines the enumerations used across the models, fan-out, and tools layers.
Placing them here avoids circular dependencies between
[relaycast.fanout][relaycast.fanout] and the model modules.

See Also:
    [relaycast.models.outcome][]: Uses
        [FailureReason][relaycast.models.constants.FailureReason] to describe
        terminal per-relay failures.
    [relaycast.fanout.connection][]: Drives
        [ConnectionState][relaycast.models.constants.ConnectionState]
        transitions for one relay socket.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Well-known Nostr event kinds referenced by relaycast.

    Attributes:
        SET_METADATA: Kind 0 -- user profile metadata (NIP-01).
        TEXT_NOTE: Kind 1 -- short text note (NIP-01).
        CONTACTS: Kind 3 -- contact list (NIP-02).
        DELETION: Kind 5 -- event deletion request (NIP-09).
        REPOST: Kind 6 -- repost (NIP-18).
        REACTION: Kind 7 -- reaction (NIP-25).
        ZAP_REQUEST: Kind 9734 -- zap request (NIP-57).
        ZAP_RECEIPT: Kind 9735 -- zap receipt (NIP-57).
        RELAY_LIST: Kind 10002 -- relay list metadata (NIP-65).
        CLIENT_AUTH: Kind 22242 -- client authentication (NIP-42).
    """

    SET_METADATA = 0
    TEXT_NOTE = 1
    CONTACTS = 3
    DELETION = 5
    REPOST = 6
    REACTION = 7
    ZAP_REQUEST = 9_734
    ZAP_RECEIPT = 9_735
    RELAY_LIST = 10_002
    CLIENT_AUTH = 22_242


class ConnectionMode(StrEnum):
    """Operation a [RelayConnection][relaycast.fanout.connection.RelayConnection] performs.

    Attributes:
        QUERY: Send ``REQ`` and collect events until ``EOSE`` or the limit.
        PUBLISH: Send ``EVENT`` and wait for the matching ``OK``.
    """

    QUERY = "query"
    PUBLISH = "publish"


class ConnectionState(StrEnum):
    """States of the per-relay protocol state machine.

    ``FINISHED`` is terminal and reachable from every other state. The
    optional ``AUTH_REQUESTED -> AUTHENTICATING -> OPEN`` detour happens
    at most once per connection.
    """

    CONNECTING = "connecting"
    OPEN = "open"
    AUTH_REQUESTED = "auth_requested"
    AUTHENTICATING = "authenticating"
    FINISHED = "finished"


class FailureReason(StrEnum):
    """Terminal per-relay failure reasons produced by relaycast itself.

    Relay-supplied rejection messages (from ``OK``/``CLOSED``) are forwarded
    verbatim and are therefore not members of this enum.

    Attributes:
        TIMEOUT: The connection-local timer expired.
        SEND_FAILED: Writing a frame to the socket failed.
        AUTH_REQUIRED: The relay sent an ``AUTH`` challenge but no key was supplied.
        AUTH_FAILED: Signing, sending, or relay acceptance of the auth event failed.
        CLOSED: Query socket closed before ``EOSE`` after some events arrived.
        CLOSED_NO_EVENTS: Query socket closed before ``EOSE`` with nothing buffered.
        INVALID_URL: The relay URL could not be parsed; no socket was opened.
    """

    TIMEOUT = "timeout"
    SEND_FAILED = "send_failed"
    AUTH_REQUIRED = "auth_required"
    AUTH_FAILED = "auth_failed"
    CLOSED = "closed"
    CLOSED_NO_EVENTS = "closed_no_events"
    INVALID_URL = "invalid_url"


# NIP-01 machine-readable prefix for auth-gated rejections
AUTH_REQUIRED_PREFIX = "auth-required:"

EVENT_KIND_MAX = 65_535
