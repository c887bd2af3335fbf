# src/flowscribe/engine/protocols.py
"""Execution engine protocol.

The engine is the external collaborator that actually runs a plugin's code
generator. generate_code() acquires one engine per call and disposes it on
every exit path.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flowscribe.contracts import ExecutionResult, PluginManifest


@runtime_checkable
class ExecutionEngine(Protocol):
    """Runs plugin code generators and resolves their manifests.

    Implementations raise EngineError subclasses on failure. The transpiler
    converts those into per-node error records; engines never need to.
    """

    async def get_execution_result(
        self,
        plugin_slug: str,
        payload: dict[str, Any],
        interface_name: str,
    ) -> ExecutionResult:
        """Run one plugin's code generator with the given payload."""
        ...

    async def get_plugin_manifest(self, plugin_slug: str) -> PluginManifest:
        """Fetch plugin metadata, including declared imports."""
        ...

    async def dispose(self) -> None:
        """Release engine resources. Called exactly once per generation call."""
        ...
