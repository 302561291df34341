"""relaycast exception hierarchy.

Per-relay failures inside the fan-out engine are never raised to the
caller: they become reason strings on a
[RelayOutcome][relaycast.models.outcome.RelayOutcome]. The exceptions here
mark the seams where a lower layer reports a failure to the connection
state machine (which converts it to a reason) or where the tool and CLI
layers reject invalid input.

Exception hierarchy:

```text
RelaycastError (base -- never raised directly)
├── ConfigurationError       -- config validation, missing keys, bad YAML
├── ConnectivityError        -- relay unreachable, socket failures
│   └── SendError            -- writing a frame to the socket failed
├── ProtocolError            -- malformed or unknown wire frame
└── AuthenticationError      -- NIP-42 auth event could not be built or signed
```

``asyncio.CancelledError`` is never wrapped and always propagates.
"""

from __future__ import annotations


class RelaycastError(Exception):
    """Base exception for all relaycast errors.

    Never raised directly -- always use a specific subclass.
    """


class ConfigurationError(RelaycastError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


class ConnectivityError(RelaycastError):
    """Base for all relay/network connectivity errors."""


class SendError(ConnectivityError):
    """Writing a frame to an open relay socket failed.

    Converted by the connection state machine into a ``send_failed`` reason.
    """


class ProtocolError(RelaycastError):
    """A frame did not match any NIP-01/NIP-42 message shape.

    Raised by [decode_message()][relaycast.nips.nip01.decode_message]; the
    connection logs and skips the frame.
    """


class AuthenticationError(RelaycastError):
    """The NIP-42 authentication event could not be built or signed.

    Converted by the connection state machine into an ``auth_failed`` reason.
    """

