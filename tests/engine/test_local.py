"""Tests for the filesystem-backed execution engine."""

import json
from pathlib import Path
from typing import Any

import pytest

from flowscribe.contracts import EngineConfigurationError, PluginExecutionError, PluginNotFoundError


def _write_plugin(base: Path, slug: str, template: str, manifest: dict[str, Any] | None = None) -> None:
    plugin_dir = base / slug
    plugin_dir.mkdir(parents=True)
    (plugin_dir / "template.py.j2").write_text(template)
    if manifest is not None:
        (plugin_dir / "manifest.json").write_text(json.dumps(manifest))


class TestLocalPluginEngine:
    def test_missing_directory(self, tmp_path: Path) -> None:
        """A base path that does not exist is a configuration error."""
        from flowscribe.engine import LocalPluginEngine

        with pytest.raises(EngineConfigurationError, match="does not exist"):
            LocalPluginEngine(tmp_path / "nope")

    @pytest.mark.asyncio
    async def test_renders_template_with_payload(self, plugin_dir: Path) -> None:
        """Payload keys render both top-level and under settings."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "linear", "{{ labelName }} = nn.Linear({{ settings.inFeatures }}, {{ outFeatures }})")
        engine = LocalPluginEngine(plugin_dir)

        result = await engine.get_execution_result(
            "linear",
            {"labelName": "fc1", "inFeatures": 4, "outFeatures": 2},
            "CodeGenerator",
        )

        assert result.code == "fc1 = nn.Linear(4, 2)"

    @pytest.mark.asyncio
    async def test_sequence_children_available(self, plugin_dir: Path) -> None:
        """Sequence templates can iterate children."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "seq", "{% for c in children %}{{ c.code }};{% endfor %}{{ itemsCount }}")
        engine = LocalPluginEngine(plugin_dir)

        result = await engine.get_execution_result(
            "seq",
            {"children": [{"code": "a"}, {"code": "b"}], "itemsCount": 2},
            "CodeGenerator",
        )

        assert result.code == "a;b;2"

    @pytest.mark.asyncio
    async def test_missing_plugin(self, plugin_dir: Path) -> None:
        """A slug without a template is not found."""
        from flowscribe.engine import LocalPluginEngine

        with pytest.raises(PluginNotFoundError, match="ghost"):
            await LocalPluginEngine(plugin_dir).get_execution_result("ghost", {}, "CodeGenerator")

    @pytest.mark.asyncio
    async def test_path_traversal_rejected(self, plugin_dir: Path) -> None:
        """Slugs escaping the base directory are rejected."""
        from flowscribe.engine import LocalPluginEngine

        (plugin_dir.parent / "outside").mkdir()
        (plugin_dir.parent / "outside" / "template.py.j2").write_text("pwned")

        with pytest.raises(PluginNotFoundError):
            await LocalPluginEngine(plugin_dir).get_execution_result("../outside", {}, "CodeGenerator")

    @pytest.mark.asyncio
    async def test_undefined_variable_is_execution_error(self, plugin_dir: Path) -> None:
        """Undefined template variables fail the render."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "strict", "{{ missing }}")

        with pytest.raises(PluginExecutionError, match="failed to render"):
            await LocalPluginEngine(plugin_dir).get_execution_result("strict", {}, "CodeGenerator")

    @pytest.mark.asyncio
    async def test_interface_mismatch(self, plugin_dir: Path) -> None:
        """A manifest naming another interface fails execution."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "linear", "x", manifest={"interface": "OtherInterface"})

        with pytest.raises(PluginExecutionError, match="expected 'CodeGenerator'"):
            await LocalPluginEngine(plugin_dir).get_execution_result("linear", {}, "CodeGenerator")

    @pytest.mark.asyncio
    async def test_manifest_imports(self, plugin_dir: Path) -> None:
        """Manifest imports are read from frontendConfigs.emits."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(
            plugin_dir,
            "linear",
            "x",
            manifest={"frontendConfigs": {"emits": {"imports": [{"path": "torch.nn", "items": ["Linear"]}]}}},
        )

        manifest = await LocalPluginEngine(plugin_dir).get_plugin_manifest("linear")

        assert [(i.path, i.items) for i in manifest.declared_imports()] == [("torch.nn", ["Linear"])]

    @pytest.mark.asyncio
    async def test_missing_manifest_is_empty(self, plugin_dir: Path) -> None:
        """A plugin without manifest.json declares no imports."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "bare", "x")

        manifest = await LocalPluginEngine(plugin_dir).get_plugin_manifest("bare")

        assert manifest.declared_imports() == []

    @pytest.mark.asyncio
    async def test_malformed_manifest(self, plugin_dir: Path) -> None:
        """get_plugin_manifest raises on unreadable JSON."""
        from flowscribe.engine import LocalPluginEngine

        (plugin_dir / "broken").mkdir()
        (plugin_dir / "broken" / "manifest.json").write_text("{not json")

        with pytest.raises(PluginExecutionError, match="Unreadable manifest"):
            await LocalPluginEngine(plugin_dir).get_plugin_manifest("broken")

    @pytest.mark.asyncio
    async def test_unreadable_manifest_does_not_block_execution(self, plugin_dir: Path) -> None:
        """Execution ignores a manifest that cannot be read."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "p", "x = 1")
        (plugin_dir / "p" / "manifest.json").write_text("{not json")

        result = await LocalPluginEngine(plugin_dir).get_execution_result("p", {}, "CodeGenerator")

        assert result.code == "x = 1"

    @pytest.mark.asyncio
    async def test_disposed_engine_refuses_work(self, plugin_dir: Path) -> None:
        """dispose is idempotent and blocks further execution."""
        from flowscribe.engine import LocalPluginEngine

        _write_plugin(plugin_dir, "linear", "x")
        engine = LocalPluginEngine(plugin_dir)

        await engine.dispose()
        await engine.dispose()

        assert engine.is_disposed
        with pytest.raises(PluginExecutionError, match="disposed"):
            await engine.get_execution_result("linear", {}, "CodeGenerator")
