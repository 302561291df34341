"""Core layer: logging, exceptions, YAML loading, and metrics.

Depends only on the standard library and its third-party stack; it is
depended upon by [relaycast.fanout][relaycast.fanout] and
[relaycast.tools][relaycast.tools].

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][relaycast.core.logger.Logger].
    StructuredFormatter: Root-handler formatter that renders structured
        fields from both ``Logger`` and plain ``logging`` records.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
"""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    ProtocolError,
    RelaycastError,
    SendError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .yaml import load_yaml


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ConnectivityError",
    "Logger",
    "ProtocolError",
    "RelaycastError",
    "SendError",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
]
