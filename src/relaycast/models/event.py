"""
Immutable Nostr event value.

The fan-out engine treats events as opaque records: it only reads ``id``
for deduplication and ``created_at`` for ordering. Validation happens
eagerly at construction so a malformed relay frame never produces a
half-valid [Event][relaycast.models.event.Event].

See Also:
    [relaycast.nips.nip01][]: Decodes incoming ``EVENT`` frames into this model.
    [relaycast.fanout.results.merge_events][]: Deduplicates and orders events.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ._validation import (
    freeze_str_tuple,
    validate_hex64,
    validate_hex128,
    validate_str_no_null,
    validate_timestamp,
)
from .constants import EVENT_KIND_MAX


_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable signed Nostr event.

    Attributes:
        id: Event id, 64 lower-case hex characters (SHA-256 of the serialized event).
        pubkey: Author public key, 64 lower-case hex characters.
        created_at: Unix timestamp in seconds.
        kind: Event kind in ``0..65535``.
        tags: Ordered tag arrays, each a tuple of strings.
        content: Arbitrary content string.
        sig: Schnorr signature, 128 lower-case hex characters.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field is out of range or contains null bytes.

    Note:
        Signatures are not verified here. Relays are trusted to relay what
        they stored; callers that need verification can do it with the
        signer collaborator.
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str

    def __post_init__(self) -> None:
        validate_hex64(self.id, "id")
        validate_hex64(self.pubkey, "pubkey")
        validate_timestamp(self.created_at, "created_at")
        validate_timestamp(self.kind, "kind")
        if self.kind > EVENT_KIND_MAX:
            raise ValueError(f"kind must be <= {EVENT_KIND_MAX}, got {self.kind}")
        validate_str_no_null(self.content, "content")
        validate_hex128(self.sig, "sig")

        if isinstance(self.tags, str) or not isinstance(self.tags, Sequence):
            raise TypeError(f"tags must be a sequence, got {type(self.tags).__name__}")
        object.__setattr__(
            self, "tags", tuple(freeze_str_tuple(tag, "tags") for tag in self.tags)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        """Build an [Event][relaycast.models.event.Event] from its NIP-01 JSON object.

        Args:
            data: Mapping with the seven NIP-01 event fields.

        Returns:
            A validated event.

        Raises:
            TypeError: If *data* is not a mapping or a field has the wrong type.
            ValueError: If a field is missing or invalid.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"event must be a mapping, got {type(data).__name__}")
        missing = [name for name in _FIELDS if name not in data]
        if missing:
            raise ValueError(f"event is missing fields: {', '.join(missing)}")
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=data["created_at"],
            kind=data["kind"],
            tags=data["tags"],
            content=data["content"],
            sig=data["sig"],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 JSON object for this event."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    def to_json(self) -> str:
        """Return the compact JSON serialization of [to_dict()][relaycast.models.event.Event.to_dict]."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def tag_values(self, name: str) -> list[str]:
        """Return the first value of every tag named *name*, in tag order."""
        return [tag[1] for tag in self.tags if len(tag) >= 2 and tag[0] == name]
