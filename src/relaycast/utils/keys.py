"""Nostr key handling and the signer collaborator.

The fan-out engine never inspects key material itself. It only needs to
turn an event template into an ``(id, signature)`` pair when a relay asks for
NIP-42 authentication; that capability is described by the
[Signer][relaycast.utils.keys.Signer] protocol and implemented on top of
``nostr_sdk.Keys`` by [NostrSdkSigner][relaycast.utils.keys.NostrSdkSigner].

Warning:
    Private keys must **never** be stored in configuration files, source
    code, or logged to any output. Pass them per call or load them from an
    environment variable with
    [load_secret_key_from_env][relaycast.utils.keys.load_secret_key_from_env].

Examples:
    ```python
    signer = NostrSdkSigner()
    pubkey = signer.derive_public_key("nsec1...")  # pragma: allowlist secret
    ```
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from nostr_sdk import (
    EventBuilder,
    EventId,
    Keys,
    Kind,
    Nip19Event,
    Nip19Profile,
    PublicKey,
    Tag,
    Timestamp,
)


@dataclass(frozen=True, slots=True)
class EventTemplate:
    """Unsigned event: everything except ``id`` and ``sig``."""

    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...] = field(default_factory=tuple)
    content: str = ""


@runtime_checkable
class Signer(Protocol):
    """Signing collaborator consumed by the NIP-42 handshake.

    Implementations may raise any exception on a bad key or signing
    failure; the caller converts it into an ``auth_failed`` outcome.
    """

    def sign(self, template: EventTemplate, private_key: str) -> tuple[str, str]:
        """Return ``(event_id, signature)`` for *template* signed with *private_key*."""
        ...

    def derive_public_key(self, private_key: str) -> str:
        """Return the 64-hex public key for *private_key*."""
        ...


class NostrSdkSigner:
    """[Signer][relaycast.utils.keys.Signer] backed by ``nostr_sdk``.

    Accepts secret keys as 64-char hex or ``nsec1`` bech32 (anything
    ``nostr_sdk.Keys.parse`` understands).
    """

    def derive_public_key(self, private_key: str) -> str:
        return Keys.parse(private_key.strip()).public_key().to_hex()

    def sign(self, template: EventTemplate, private_key: str) -> tuple[str, str]:
        keys = Keys.parse(private_key.strip())
        if keys.public_key().to_hex() != template.pubkey:
            raise ValueError("Template pubkey does not match the signing key")

        builder = (
            EventBuilder(Kind(template.kind), template.content)
            .tags([Tag.parse(list(tag)) for tag in template.tags])
            .custom_created_at(Timestamp.from_secs(template.created_at))
        )
        signed = builder.sign_with_keys(keys)
        return signed.id().to_hex(), signed.signature()


def load_secret_key_from_env(env_var: str) -> str:
    """Load and validate a secret key from an environment variable.

    Args:
        env_var: Name of the environment variable containing the key.

    Returns:
        The key string exactly as stored (hex or nsec), after checking that
        ``nostr_sdk.Keys.parse`` accepts it.

    Raises:
        ValueError: If the variable is unset, empty, or not a valid secret key.
    """
    value = (os.getenv(env_var) or "").strip()
    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )
    try:
        Keys.parse(value)
    except Exception as e:  # noqa: BLE001  # nostr-sdk FFI raises its own error type
        raise ValueError(f"{env_var} does not hold a valid secret key: {e}") from e
    return value


def normalize_public_key(value: str) -> str | None:
    """Return the 64-hex form of a public key.

    Accepts hex, ``npub1``, ``nprofile1``, or a NIP-21 URI. Returns ``None``
    when ``nostr_sdk`` cannot parse *value*.
    """
    value = value.strip()
    try:
        if value.startswith("nprofile1"):
            return Nip19Profile.from_bech32(value).public_key().to_hex()
        return PublicKey.parse(value).to_hex()
    except Exception:  # noqa: BLE001  # nostr-sdk FFI raises its own error type
        return None


def normalize_event_id(value: str) -> str | None:
    """Return the 64-hex form of an event id.

    Accepts hex, ``note1``, ``nevent1``, or a NIP-21 URI. Returns ``None``
    when ``nostr_sdk`` cannot parse *value*.
    """
    value = value.strip()
    try:
        if value.startswith("nevent1"):
            return Nip19Event.from_bech32(value).event_id().to_hex()
        return EventId.parse(value).to_hex()
    except Exception:  # noqa: BLE001  # nostr-sdk FFI raises its own error type
        return None
