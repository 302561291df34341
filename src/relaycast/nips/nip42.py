"""NIP-42 client authentication.

When a relay sends ``["AUTH", <challenge>]`` the client answers with
``["AUTH", <event>]`` where the event is a signed kind-22242 event tagged
with the relay URL and the challenge:

```json
{"kind": 22242, "content": "",
 "tags": [["relay", "wss://relay.example.com"], ["challenge", "<challenge>"]]}
```

[build_auth_event()][relaycast.nips.nip42.build_auth_event] is pure
orchestration over the [Signer][relaycast.utils.keys.Signer]
collaborator: it never touches the socket and completes synchronously
before the connection proceeds.
"""

from __future__ import annotations

import time

from relaycast.core.exceptions import AuthenticationError
from relaycast.models.constants import EventKind
from relaycast.models.event import Event
from relaycast.utils.keys import EventTemplate, Signer


def auth_tags(relay_url: str, challenge: str) -> tuple[tuple[str, ...], ...]:
    """Return the NIP-42 tag pair for *relay_url* and *challenge*."""
    return (("relay", relay_url), ("challenge", challenge))


def build_auth_event(
    relay_url: str,
    challenge: str,
    private_key: str,
    signer: Signer,
    *,
    created_at: int | None = None,
) -> Event:
    """Build and sign the kind-22242 authentication event for one relay.

    Args:
        relay_url: URL of the relay that issued the challenge.
        challenge: Challenge string from the relay's ``AUTH`` frame.
        private_key: Caller-supplied secret key (hex or nsec).
        signer: Signing collaborator.
        created_at: Override for the event timestamp (defaults to now).

    Returns:
        The signed authentication event.

    Raises:
        AuthenticationError: If key derivation or signing fails, or the
            signer returns a malformed id or signature.
    """
    try:
        pubkey = signer.derive_public_key(private_key)
        template = EventTemplate(
            pubkey=pubkey,
            created_at=int(time.time()) if created_at is None else created_at,
            kind=EventKind.CLIENT_AUTH,
            tags=auth_tags(relay_url, challenge),
            content="",
        )
        event_id, sig = signer.sign(template, private_key)
        return Event(
            id=event_id,
            pubkey=template.pubkey,
            created_at=template.created_at,
            kind=int(template.kind),
            tags=template.tags,
            content=template.content,
            sig=sig,
        )
    except Exception as e:  # noqa: BLE001  # signer is an arbitrary collaborator
        raise AuthenticationError(str(e) or type(e).__name__) from e
