"""Human-readable rendering of events."""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime

from nostr_sdk import PublicKey

from relaycast.models.event import Event


CONTENT_PREVIEW_LENGTH = 240


def format_pubkey(pubkey: str, *, short: bool = False) -> str:
    """Render a 64-hex public key as ``npub1...``.

    With ``short=True`` only the first 8 and last 4 characters are kept.
    Falls back to the hex form when the key cannot be encoded.
    """
    if not pubkey:
        return "unknown"
    try:
        npub = PublicKey.parse(pubkey).to_bech32()
    except Exception:  # noqa: BLE001  # nostr-sdk FFI raises its own error type
        return f"{pubkey[:4]}...{pubkey[60:]}" if short else pubkey
    if short:
        return f"{npub[:8]}...{npub[-4:]}"
    return npub


def _format_timestamp(created_at: int) -> str:
    try:
        return datetime.fromtimestamp(created_at, tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, OSError, ValueError):
        # Relays may send timestamps beyond what datetime can represent
        return str(created_at)


def format_event(event: Event) -> str:
    """Render one event as a block of ``Field: value`` lines ending in ``---``."""
    created = _format_timestamp(event.created_at)
    content = event.content
    if len(content) > CONTENT_PREVIEW_LENGTH:
        content = f"{content[:CONTENT_PREVIEW_LENGTH]}…"
    tags = json.dumps([list(tag) for tag in event.tags], ensure_ascii=False) if event.tags else "[]"
    return "\n".join(
        [
            f"Kind: {event.kind}",
            f"ID: {event.id}",
            f"Author: {format_pubkey(event.pubkey, short=True)}",
            f"Created: {created}",
            f"Content: {content}",
            f"Tags: {tags}",
            "---",
        ]
    )


def format_events_list(events: Iterable[Event]) -> str:
    return "\n".join(format_event(event) for event in events)
