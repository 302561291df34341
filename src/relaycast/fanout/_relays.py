"""Relay list normalization shared by the coordinators."""

from __future__ import annotations

from collections.abc import Iterable

from relaycast.models.constants import FailureReason
from relaycast.models.outcome import RelayOutcome
from relaycast.models.relay import Relay


def plan_relays(relays: Iterable[str]) -> list[str | RelayOutcome]:
    """Normalize, deduplicate, and pre-fail a caller's relay list.

    Returns one entry per distinct relay in first-seen order: the normalized
    URL for relays that should be contacted, or an already-failed
    [RelayOutcome][relaycast.models.outcome.RelayOutcome] for URLs that
    cannot be parsed. Invalid inputs are deduplicated by their raw text.
    """
    planned: list[str | RelayOutcome] = []
    seen: set[str] = set()
    for raw in relays:
        try:
            url = Relay(raw).url
        except ValueError as e:
            key = str(raw)
            if key in seen:
                continue
            seen.add(key)
            planned.append(
                RelayOutcome(relay=key, ok=False, reason=f"{FailureReason.INVALID_URL}: {e}")
            )
            continue
        if url in seen:
            continue
        seen.add(url)
        planned.append(url)
    return planned
