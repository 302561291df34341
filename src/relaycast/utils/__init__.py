"""Key handling and WebSocket transport.

The utils layer depends only on [relaycast.models][relaycast.models] and
[relaycast.core][relaycast.core]. It provides the two low-level
collaborators of the fan-out engine.

Attributes:
    keys: [Signer][relaycast.utils.keys.Signer] protocol, its
        ``nostr_sdk``-backed implementation, and key/identifier parsing.
    transport: aiohttp-based WebSocket context manager with guaranteed
        release of the socket and session.
"""
