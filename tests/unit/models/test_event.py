"""
Unit tests for models.event module.

Tests:
- Construction and field validation (hex lengths, kind range, timestamps)
- from_dict() / to_dict() against the NIP-01 JSON shape
- Compact JSON serialization
- Tag freezing and tag_values()
"""

import json

import pytest

from relaycast.models import Event


def _data(**overrides):
    data = {
        "id": "1" * 64,
        "pubkey": "a" * 64,
        "created_at": 1_700_000_000,
        "kind": 1,
        "tags": [["e", "2" * 64], ["p", "3" * 64, "wss://nos.lol"]],
        "content": "hello",
        "sig": "b" * 128,
    }
    data.update(overrides)
    return data


class TestFromDict:
    """Event.from_dict()."""

    def test_valid(self):
        event = Event.from_dict(_data())
        assert event.id == "1" * 64
        assert event.kind == 1
        assert event.tags == (("e", "2" * 64), ("p", "3" * 64, "wss://nos.lol"))

    def test_missing_field(self):
        data = _data()
        del data["sig"]
        with pytest.raises(ValueError, match="missing fields: sig"):
            Event.from_dict(data)

    def test_not_a_mapping(self):
        with pytest.raises(TypeError):
            Event.from_dict(["EVENT"])  # type: ignore[arg-type]


class TestValidation:
    """__post_init__ validation."""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("id", "1" * 63),
            ("id", "G" * 64),
            ("id", "A" * 64),
            ("pubkey", "a" * 65),
            ("sig", "b" * 64),
            ("kind", 65_536),
            ("created_at", -1),
            ("content", "bad\x00content"),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            Event.from_dict(_data(**{field: value}))

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("kind", "1"),
            ("created_at", 1.5),
            ("created_at", True),
            ("content", None),
            ("tags", "not-a-list"),
            ("tags", [[1, 2]]),
        ],
    )
    def test_rejects_wrong_types(self, field, value):
        with pytest.raises(TypeError):
            Event.from_dict(_data(**{field: value}))

    def test_max_kind_accepted(self):
        assert Event.from_dict(_data(kind=65_535)).kind == 65_535


class TestSerialization:
    """to_dict() and to_json()."""

    def test_to_dict_matches_input(self):
        data = _data()
        assert Event.from_dict(data).to_dict() == data

    def test_to_json_is_compact(self):
        text = Event.from_dict(_data(tags=[])).to_json()
        assert ", " not in text
        assert json.loads(text)["content"] == "hello"

    def test_to_json_keeps_unicode(self):
        text = Event.from_dict(_data(content="héllo ⚡")).to_json()
        assert "héllo ⚡" in text


class TestTags:
    """Tag access."""

    def test_tag_values(self):
        event = Event.from_dict(_data())
        assert event.tag_values("p") == ["3" * 64]
        assert event.tag_values("t") == []

    def test_tag_values_skips_short_tags(self):
        event = Event.from_dict(_data(tags=[["t"], ["t", "nostr"]]))
        assert event.tag_values("t") == ["nostr"]

    def test_tags_are_immutable(self):
        event = Event.from_dict(_data())
        assert isinstance(event.tags, tuple)
        assert all(isinstance(tag, tuple) for tag in event.tags)
