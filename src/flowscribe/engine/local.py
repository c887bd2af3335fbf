# src/flowscribe/engine/local.py
"""Filesystem-backed execution engine.

Plugin layout under the base directory:

    <base>/<slug>/template.py.j2   code generator (Jinja2, sandboxed)
    <base>/<slug>/manifest.json    optional metadata (emits.imports, interface)

The payload is exposed to the template both as ``settings`` and as
top-level names, so ``{{ labelName }}`` and ``{{ settings.labelName }}``
are equivalent. Sequence plugins iterate ``children``.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog
from jinja2 import FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment
from pydantic import ValidationError

from flowscribe.contracts import (
    EngineConfigurationError,
    ExecutionResult,
    PluginExecutionError,
    PluginManifest,
    PluginNotFoundError,
)

logger = structlog.get_logger(__name__)

TEMPLATE_FILE = "template.py.j2"
MANIFEST_FILE = "manifest.json"


class LocalPluginEngine:
    """Renders plugin templates from a local plugin directory."""

    def __init__(
        self,
        base_path: Path,
        *,
        timeout_seconds: float | None = None,
        debug: bool = False,
    ) -> None:
        if not base_path.is_dir():
            raise EngineConfigurationError(
                f"Local plugin directory does not exist: {base_path}",
                field="bucket_or_base_path",
            )
        self._base_path = base_path.resolve()
        self._timeout_seconds = timeout_seconds
        self._debug = debug
        self._disposed = False
        self._env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self._base_path)),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
            autoescape=False,
        )

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _plugin_dir(self, plugin_slug: str) -> Path:
        """Resolve a slug to its directory, refusing anything outside the base."""
        candidate = (self._base_path / plugin_slug).resolve()
        if not plugin_slug or candidate == self._base_path or not candidate.is_relative_to(self._base_path):
            raise PluginNotFoundError(plugin_slug, str(self._base_path))
        return candidate

    def _ensure_open(self) -> None:
        if self._disposed:
            raise PluginExecutionError("Engine has been disposed")

    def _read_manifest(self, plugin_slug: str) -> dict[str, Any]:
        manifest_path = self._plugin_dir(plugin_slug) / MANIFEST_FILE
        if not manifest_path.exists():
            return {}
        try:
            raw = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise PluginExecutionError(f"Unreadable manifest for '{plugin_slug}': {e}", slug=plugin_slug) from e
        if not isinstance(raw, dict):
            raise PluginExecutionError(f"Manifest for '{plugin_slug}' must be a JSON object", slug=plugin_slug)
        return raw

    def _render(self, plugin_slug: str, payload: dict[str, Any]) -> str:
        template_name = (self._plugin_dir(plugin_slug) / TEMPLATE_FILE).relative_to(self._base_path).as_posix()
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise PluginNotFoundError(plugin_slug, str(self._base_path)) from e
        try:
            return template.render({**payload, "settings": payload})
        except TemplateError as e:
            raise PluginExecutionError(f"Plugin '{plugin_slug}' failed to render: {e}", slug=plugin_slug) from e

    async def _declared_interface(self, plugin_slug: str) -> str | None:
        """Interface named by the manifest; an unreadable manifest names none."""
        try:
            manifest = await asyncio.to_thread(self._read_manifest, plugin_slug)
        except PluginExecutionError as e:
            logger.debug("manifest_unavailable", slug=plugin_slug, error=str(e))
            return None
        declared = manifest.get("interface")
        return declared if isinstance(declared, str) else None

    async def get_execution_result(
        self,
        plugin_slug: str,
        payload: dict[str, Any],
        interface_name: str,
    ) -> ExecutionResult:
        self._ensure_open()
        declared = await self._declared_interface(plugin_slug)
        if declared is not None and declared != interface_name:
            raise PluginExecutionError(
                f"Plugin '{plugin_slug}' implements '{declared}', expected '{interface_name}'",
                slug=plugin_slug,
            )

        if self._debug:
            logger.debug("local_plugin_render", slug=plugin_slug, base_path=str(self._base_path))

        try:
            code = await asyncio.wait_for(
                asyncio.to_thread(self._render, plugin_slug, payload),
                timeout=self._timeout_seconds,
            )
        except TimeoutError as e:
            raise PluginExecutionError(
                f"Plugin '{plugin_slug}' timed out after {self._timeout_seconds}s",
                slug=plugin_slug,
            ) from e
        return ExecutionResult(code=code)

    async def get_plugin_manifest(self, plugin_slug: str) -> PluginManifest:
        self._ensure_open()
        raw = await asyncio.to_thread(self._read_manifest, plugin_slug)
        try:
            return PluginManifest.model_validate(raw)
        except ValidationError as e:
            raise PluginExecutionError(f"Invalid manifest for '{plugin_slug}': {e}", slug=plugin_slug) from e

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._env.cache is not None:
            self._env.cache.clear()
        logger.debug("local_engine_disposed", base_path=str(self._base_path))
