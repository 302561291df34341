"""Tests for lazy import system in relaycast.__init__."""

from __future__ import annotations

import importlib
import sys

import pytest


class TestLazyImports:
    """Test PEP 562 lazy loading in relaycast.__init__."""

    def test_lazy_import_does_not_eagerly_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Importing relaycast alone leaves the subpackages unloaded."""
        saved = {name: mod for name, mod in sys.modules.items() if name.startswith("relaycast")}
        for name in saved:
            monkeypatch.delitem(sys.modules, name)

        try:
            importlib.import_module("relaycast")
            assert "relaycast.core" not in sys.modules
            assert "relaycast.models" not in sys.modules
            assert "relaycast.fanout" not in sys.modules
            assert "relaycast.tools" not in sys.modules
        finally:
            for name in [n for n in sys.modules if n.startswith("relaycast")]:
                del sys.modules[name]
            sys.modules.update(saved)

    def test_lazy_import_resolves_on_access(self) -> None:
        from relaycast import Relay
        from relaycast.models.relay import Relay as DirectRelay

        assert Relay is DirectRelay

    def test_fanout_and_tools_resolve(self) -> None:
        from relaycast import query_events, query_relays
        from relaycast.fanout.query import query_relays as direct_query_relays
        from relaycast.tools.events import query_events as direct_query_events

        assert query_relays is direct_query_relays
        assert query_events is direct_query_events

    def test_lazy_import_caches_after_first_access(self) -> None:
        import relaycast

        _ = relaycast.Filter
        assert "Filter" in vars(relaycast)

    def test_lazy_import_invalid_attribute(self) -> None:
        import relaycast

        with pytest.raises(AttributeError, match="no_such_thing"):
            _ = getattr(relaycast, "no_such_thing")  # noqa: B009

    def test_all_exports_are_in_lazy_imports(self) -> None:
        import relaycast

        assert set(relaycast.__all__) == set(relaycast._LAZY_IMPORTS)

    def test_dir_returns_all(self) -> None:
        import relaycast

        assert dir(relaycast) == relaycast.__all__

    def test_version_is_accessible(self) -> None:
        import relaycast

        assert isinstance(relaycast.__version__, str)
        assert relaycast.__version__
