"""Client configuration for the tool layer and the CLI.

All fields have sensible defaults so an empty YAML file (or no file at all)
yields a working configuration against a set of well-known public relays.

Examples:
    ```yaml
    relays:
      - wss://relay.damus.io
      - wss://nos.lol
    timeout: 5
    query_limit: 50
    auth_key_env: NOSTR_PRIVATE_KEY
    ```

See Also:
    [load_yaml][relaycast.core.yaml.load_yaml]: Safe YAML loader used by
        [from_yaml()][relaycast.tools.configs.ClientConfig.from_yaml].
    [load_secret_key_from_env][relaycast.utils.keys.load_secret_key_from_env]:
        Loads ``auth_key`` from the variable named by ``auth_key_env``.
"""

from __future__ import annotations

from typing import Any, Final, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from relaycast.core.yaml import load_yaml
from relaycast.fanout.connection import DEFAULT_TIMEOUT
from relaycast.models.relay import Relay
from relaycast.utils.keys import load_secret_key_from_env


DEFAULT_RELAYS: Final[tuple[str, ...]] = (
    "wss://relay.damus.io",
    "wss://relay.nostr.band",
    "wss://relay.primal.net",
    "wss://nos.lol",
    "wss://purplerelay.com",
    "wss://nostr.land",
)

MAX_QUERY_LIMIT: Final[int] = 200


class ClientConfig(BaseModel):
    """Defaults applied by the tool functions when a caller omits a value.

    Attributes:
        relays: Relays contacted when a call does not name any.
        timeout: Per-relay budget in seconds.
        query_limit: Default ``limit`` for queries (1..200).
        auth_key_env: Environment variable holding a NIP-42 secret key.
            When set, ``auth_key`` is loaded from it during validation.
        auth_key: Secret key (hex or nsec) used to answer ``AUTH`` challenges.

    Warning:
        ``auth_key`` holds a live private key. It is excluded from ``repr``
        and from ``model_dump()``; never log this model in full.
    """

    relays: list[str] = Field(default_factory=lambda: list(DEFAULT_RELAYS))
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0.0, le=300.0)
    query_limit: int = Field(default=25, ge=1, le=MAX_QUERY_LIMIT)
    auth_key_env: str | None = Field(default=None, min_length=1)
    auth_key: str | None = Field(default=None, repr=False, exclude=True)

    @field_validator("relays")
    @classmethod
    def validate_relay_urls(cls, v: list[str]) -> list[str]:
        """Validate that all relay URLs are valid WebSocket URLs."""
        for url in v:
            try:
                Relay(url)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid relay URL '{url}': {e}") from e
        return v

    @model_validator(mode="before")
    @classmethod
    def _load_auth_key_from_env(cls, data: Any) -> Any:
        """Populate ``auth_key`` from ``auth_key_env`` when not given directly."""
        if isinstance(data, dict) and data.get("auth_key_env") and not data.get("auth_key"):
            data = {**data, "auth_key": load_secret_key_from_env(data["auth_key_env"])}
        return data

    @classmethod
    def from_yaml(cls, config_path: str) -> Self:
        """Create a configuration from a YAML file.

        Raises:
            FileNotFoundError: If *config_path* does not exist.
            ConfigurationError: If the file is not valid YAML or not a mapping.
            pydantic.ValidationError: If a value is out of range.
        """
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a configuration from a pre-parsed dictionary."""
        return cls(**data)
