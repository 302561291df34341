"""Nostr protocol messages used by the fan-out engine.

Attributes:
    nip01: Wire codec for ``REQ``/``CLOSE``/``EVENT``/``AUTH`` frames sent to
        relays and ``EVENT``/``EOSE``/``OK``/``AUTH``/``CLOSED``/``NOTICE``
        frames received from them.
    nip42: Construction of the signed kind-22242 authentication event.
"""

from .nip01 import (
    AuthMessage,
    ClosedMessage,
    EoseMessage,
    EventMessage,
    NoticeMessage,
    OkMessage,
    RelayMessage,
    decode_message,
    encode_auth,
    encode_close,
    encode_event,
    encode_req,
    new_subscription_id,
)
from .nip42 import auth_tags, build_auth_event


__all__ = [
    "AuthMessage",
    "ClosedMessage",
    "EoseMessage",
    "EventMessage",
    "NoticeMessage",
    "OkMessage",
    "RelayMessage",
    "auth_tags",
    "build_auth_event",
    "decode_message",
    "encode_auth",
    "encode_close",
    "encode_event",
    "encode_req",
    "new_subscription_id",
]
