"""
Immutable NIP-01 subscription filter.

A [Filter][relaycast.models.filter.Filter] is constructed once per query and
shared read-only by every relay connection of that query. Serialization
follows NIP-01: tag filters become ``#<letter>`` keys and unset fields are
omitted entirely.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ._validation import (
    freeze_str_tuple,
    validate_hex64,
    validate_str_no_null,
    validate_timestamp,
)
from .constants import EVENT_KIND_MAX


_TAG_KEY = re.compile(r"[a-zA-Z0-9]")


def _freeze_ints(values: Iterable[Any], name: str) -> tuple[int, ...]:
    result = tuple(values)
    for value in result:
        validate_timestamp(value, name)
        if value > EVENT_KIND_MAX:
            raise ValueError(f"{name} values must be <= {EVENT_KIND_MAX}")
    return result


@dataclass(frozen=True, slots=True)
class Filter:
    """Declarative query descriptor sent in a ``REQ`` frame.

    Attributes:
        kinds: Event kinds to match.
        authors: Author public keys (64 lower-case hex).
        ids: Event ids (64 lower-case hex).
        since: Lower bound on ``created_at`` (inclusive, unix seconds).
        until: Upper bound on ``created_at`` (inclusive, unix seconds).
        limit: Maximum number of events; a per-relay hint and a courtesy
            cap on the merged result.
        tags: Single-letter tag name to accepted values (``{"p": [...]}``).
        search: NIP-50 free-text search string.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a value is out of range or a tag key is not a single
            alphanumeric character.

    Examples:
        ```python
        f = Filter(kinds=[1], tags={"t": ["nostr"]}, limit=10)
        f.to_dict()
        # {'kinds': [1], 'limit': 10, '#t': ['nostr']}
        ```
    """

    kinds: tuple[int, ...] | None = None
    authors: tuple[str, ...] | None = None
    ids: tuple[str, ...] | None = None
    since: int | None = None
    until: int | None = None
    limit: int | None = None
    tags: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    search: str | None = None

    def __post_init__(self) -> None:
        if self.kinds is not None:
            object.__setattr__(self, "kinds", _freeze_ints(self.kinds, "kinds"))
        for name in ("authors", "ids"):
            values = getattr(self, name)
            if values is None:
                continue
            frozen = freeze_str_tuple(values, name)
            for value in frozen:
                validate_hex64(value, name)
            object.__setattr__(self, name, frozen)

        for name in ("since", "until"):
            value = getattr(self, name)
            if value is not None:
                validate_timestamp(value, name)
        if self.limit is not None:
            validate_timestamp(self.limit, "limit")
            if self.limit == 0:
                raise ValueError("limit must be positive")
        if self.search is not None:
            validate_str_no_null(self.search, "search")

        if not isinstance(self.tags, Mapping):
            raise TypeError(f"tags must be a Mapping, got {type(self.tags).__name__}")
        frozen_tags: dict[str, tuple[str, ...]] = {}
        for key, values in self.tags.items():
            if not isinstance(key, str) or not _TAG_KEY.fullmatch(key):
                raise ValueError(f"Invalid tag filter key {key!r}: must be a single letter or digit")
            frozen_tags[key] = freeze_str_tuple(values, f"#{key}")
        object.__setattr__(self, "tags", MappingProxyType(frozen_tags))

    def to_dict(self) -> dict[str, Any]:
        """Return the NIP-01 filter object, omitting unset fields."""
        result: dict[str, Any] = {}
        if self.ids is not None:
            result["ids"] = list(self.ids)
        if self.authors is not None:
            result["authors"] = list(self.authors)
        if self.kinds is not None:
            result["kinds"] = list(self.kinds)
        if self.since is not None:
            result["since"] = self.since
        if self.until is not None:
            result["until"] = self.until
        if self.limit is not None:
            result["limit"] = self.limit
        for key, values in self.tags.items():
            result[f"#{key}"] = list(values)
        if self.search is not None:
            result["search"] = self.search
        return result
