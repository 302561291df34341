"""
Validated Nostr relay URL.

A relay is named by a ``ws://`` or ``wss://`` URL. Two spellings of the same
endpoint (``WSS://Nos.lol:443/`` and ``wss://nos.lol``) normalize to one
string, and that string is the identity of a
[RelayConnection][relaycast.fanout.connection.RelayConnection] within one
call: coordinators collapse inputs that normalize to the same URL so no two
connections ever share one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final, NamedTuple

from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator


_DEFAULT_PORTS: Final[dict[str, int]] = {"ws": 80, "wss": 443}

_REPEATED_SLASHES = re.compile(r"/{2,}")

_VALIDATOR: Final[Validator] = (
    Validator()
    .require_presence_of("scheme", "host")
    .allow_schemes("ws", "wss")
    .check_validity_of("scheme", "host", "port", "path")
)


class _RelayParts(NamedTuple):
    scheme: str
    host: str
    port: int | None
    path: str | None


def _split_relay_url(raw: str) -> _RelayParts:
    """Validate *raw* against RFC 3986 and return its normalized parts.

    Scheme and host are lower-cased by ``rfc3986`` normalization. The port
    is dropped when it is the scheme default; the path loses repeated and
    trailing slashes.
    """
    uri = uri_reference(raw.strip()).normalize()
    try:
        _VALIDATOR.validate(uri)
    except UnpermittedComponentError:
        raise ValueError("Invalid scheme: must be ws or wss") from None
    except ValidationError as e:
        raise ValueError(f"Invalid URL: {e}") from None

    if uri.query:
        raise ValueError(f"Relay URL must not contain a query string: ?{uri.query}")
    if uri.fragment:
        raise ValueError(f"Relay URL must not contain a fragment: #{uri.fragment}")

    host = uri.host.strip("[]")
    if not host:
        raise ValueError("Invalid URL: empty host")

    port = int(uri.port) if uri.port else None
    if port == _DEFAULT_PORTS[uri.scheme]:
        port = None

    path = _REPEATED_SLASHES.sub("/", uri.path or "").rstrip("/") or None
    return _RelayParts(uri.scheme, host, port, path)


@dataclass(frozen=True, slots=True)
class Relay:
    """Immutable, normalized relay endpoint.

    The scheme is kept as the caller wrote it and local or private addresses
    are accepted: a client talks to whichever relay it is told to.

    Attributes:
        raw_url: The string as given.
        url: Normalized URL; the relay's identity.
        scheme: ``ws`` or ``wss``.
        host: Hostname or IP address (IPv6 without brackets).
        port: Non-default port, or ``None``.
        path: Normalized path, or ``None``.

    Raises:
        ValueError: If the URL is not a string, contains null bytes, is not
            a ``ws``/``wss`` URL, or carries a query string or fragment.

    Examples:
        ```python
        relay = Relay("WSS://Relay.Damus.io:443/")
        relay.url       # 'wss://relay.damus.io'
        relay.port      # None
        ```
    """

    raw_url: str = field(repr=False)
    url: str = field(init=False)
    scheme: str = field(init=False)
    host: str = field(init=False)
    port: int | None = field(init=False)
    path: str | None = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.raw_url, str):
            raise ValueError(f"Relay URL must be a str, got {type(self.raw_url).__name__}")
        if "\x00" in self.raw_url:
            raise ValueError("Relay URL contains null bytes")

        parts = _split_relay_url(self.raw_url)
        netloc = f"[{parts.host}]" if ":" in parts.host else parts.host
        if parts.port is not None:
            netloc = f"{netloc}:{parts.port}"

        for name, value in parts._asdict().items():
            object.__setattr__(self, name, value)
        object.__setattr__(self, "url", f"{parts.scheme}://{netloc}{parts.path or ''}")

    def __str__(self) -> str:
        return self.url
