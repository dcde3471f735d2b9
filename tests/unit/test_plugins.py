"""Plugin Loading Tests for LayerFactory."""
from __future__ import annotations

from importlib.metadata import EntryPoint

import pytest


def _patch_entry_points(monkeypatch: pytest.MonkeyPatch, eps: list[EntryPoint]) -> list[str]:
    import layerfactory.plugins

    groups: list[str] = []

    def fake_entry_points(group: str):
        groups.append(group)
        return [ep for ep in eps if ep.group == group]

    monkeypatch.setattr(layerfactory.plugins, "entry_points", fake_entry_points)
    return groups


class TestLoadPlugins:
    """Tests for load_plugins()."""

    def test_registers_plugin_types(self, monkeypatch, registry, native_caps) -> None:
        from layerfactory.factory import create
        from layerfactory.plugins import load_plugins
        from python_layers import ScaleOperator

        _patch_entry_points(monkeypatch, [
            EntryPoint("scale", "python_layers:register_scale", "layerfactory.operators"),
        ])

        assert load_plugins(registry=registry) == ["scale"]
        op = create({"type": "Scale", "params": {"param_str": "3"}},
                    capabilities=native_caps, registry=registry)
        assert isinstance(op, ScaleOperator)

    def test_custom_group(self, monkeypatch, empty_registry) -> None:
        from layerfactory.plugins import load_plugins

        groups = _patch_entry_points(monkeypatch, [
            EntryPoint("scale", "python_layers:register_scale", "lab.operators"),
        ])

        assert load_plugins("layerfactory.operators", registry=empty_registry) == []
        assert load_plugins("lab.operators", registry=empty_registry) == ["scale"]
        assert groups == ["layerfactory.operators", "lab.operators"]

    def test_reload_is_idempotent(self, monkeypatch, empty_registry) -> None:
        """Loading the same plugins twice registers equal rules."""
        from layerfactory.plugins import load_plugins

        _patch_entry_points(monkeypatch, [
            EntryPoint("scale", "python_layers:register_scale", "layerfactory.operators"),
        ])
        load_plugins(registry=empty_registry)
        load_plugins(registry=empty_registry)
        assert empty_registry.type_names == ("Scale",)

    def test_failing_hook(self, monkeypatch, empty_registry) -> None:
        from layerfactory.exceptions import PluginLoadError
        from layerfactory.plugins import load_plugins

        _patch_entry_points(monkeypatch, [
            EntryPoint("broken", "python_layers:register_broken", "layerfactory.operators"),
        ])
        with pytest.raises(PluginLoadError, match="broken") as exc_info:
            load_plugins(registry=empty_registry)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.group == "layerfactory.operators"

    def test_missing_module(self, monkeypatch, empty_registry) -> None:
        from layerfactory.exceptions import PluginLoadError
        from layerfactory.plugins import load_plugins

        _patch_entry_points(monkeypatch, [
            EntryPoint("gone", "no_such_plugin_pkg:register", "layerfactory.operators"),
        ])
        with pytest.raises(PluginLoadError):
            load_plugins(registry=empty_registry)

    def test_conflict_propagates(self, monkeypatch, registry) -> None:
        """A plugin claiming a built-in type fails with the registry error."""
        from layerfactory.exceptions import DuplicateRegistrationError
        from layerfactory.plugins import load_plugins

        monkeypatch.setattr(
            "python_layers.register_scale",
            lambda reg: reg.register("ReLU", lambda spec, caps: None),
        )
        _patch_entry_points(monkeypatch, [
            EntryPoint("scale", "python_layers:register_scale", "layerfactory.operators"),
        ])
        with pytest.raises(DuplicateRegistrationError, match="ReLU"):
            load_plugins(registry=registry)
