# src/flowscribe/transpiler/executor.py
"""Plugin execution: one run per plugin node per generation call.

Nodes are executed strictly sequentially, in the order they first appear
across the expanded paths. A node referenced by many paths is executed once
and its PluginResult is shared. Failures are recorded on the node's result
and never abort the loop.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from flowscribe.contracts import (
    ChildInvocation,
    ImportDecl,
    NodeID,
    NodeKind,
    Path,
    PluginExecutionError,
    PluginResult,
    SequenceItem,
    WorkflowNode,
)
from flowscribe.core.classification import ClassifiedNode
from flowscribe.core.config import GenerationOptions
from flowscribe.core.graph import WorkflowGraph
from flowscribe.engine.protocols import ExecutionEngine
from flowscribe.plugins.manager import GeneratorManager

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class GenerationContext:
    """Mutable state of one generation call. Never shared between calls."""

    processed_node_ids: set[NodeID] = field(default_factory=set)
    results: dict[NodeID, PluginResult] = field(default_factory=dict)
    child_errors: dict[str, str] = field(default_factory=dict)


def plugin_node_ids(graph: WorkflowGraph, paths: Iterable[Path]) -> list[NodeID]:
    """Plugin nodes touched by any path, in first-appearance order."""
    ordered: dict[NodeID, None] = {}
    for path in paths:
        for node_id in path.nodes:
            if graph.kind_of(node_id) == NodeKind.PLUGIN:
                ordered.setdefault(node_id, None)
    return list(ordered)


def find_soft_error(code: str, sentinels: Iterable[str]) -> str | None:
    """Trimmed code when it starts with an error sentinel, else None."""
    trimmed = code.strip()
    if any(trimmed.startswith(sentinel) for sentinel in sentinels):
        return trimmed
    return None


class PluginExecutor:
    """Runs plugin nodes against an execution engine.

    Nodes whose type tag is claimed by an in-process generator are handled
    by that generator and never reach the engine.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        graph: WorkflowGraph,
        *,
        options: GenerationOptions | None = None,
        generators: GeneratorManager | None = None,
    ) -> None:
        self._engine = engine
        self._graph = graph
        self._options = options or GenerationOptions()
        self._generators = generators

    async def run(self, paths: Iterable[Path], context: GenerationContext | None = None) -> GenerationContext:
        context = context or GenerationContext()
        for node_id in plugin_node_ids(self._graph, paths):
            if node_id in context.processed_node_ids:
                continue
            context.processed_node_ids.add(node_id)

            classified = self._graph.get(node_id)
            # plugin_node_ids() only yields ids present in the graph
            assert classified is not None
            context.results[node_id] = await self.execute_node(classified, context)
        return context

    async def execute_node(self, classified: ClassifiedNode, context: GenerationContext) -> PluginResult:
        """Execute one plugin node; errors are captured on the result."""
        node = classified.node
        node_id = NodeID(node.id)
        try:
            generator = self._generators.get_generator_for_type(node.type) if self._generators else None
            if generator is not None:
                generated = generator.generate(node)
                logger.debug("generator_executed", node_id=node_id, generator=generator.name)
                return PluginResult(node_id=node_id, code=generated.code, imports=generated.imports)
            return await self._execute_with_engine(classified, context)
        except Exception as e:
            logger.error("plugin_execution_failed", node_id=node_id, slug=classified.slug, error=str(e))
            return PluginResult(
                node_id=node_id,
                code=f"# Error executing plugin for node {node_id}: {e}",
                error=str(e),
            )

    async def _execute_with_engine(self, classified: ClassifiedNode, context: GenerationContext) -> PluginResult:
        node = classified.node
        node_id = NodeID(node.id)
        slug = classified.slug
        if slug is None:
            raise PluginExecutionError(f"Node '{node_id}' has no plugin slug")

        payload: dict[str, Any] = {**(node.data.plugin_settings or {}), "labelName": node.data.label}

        children_imports: list[ImportDecl] = []
        sequence_items = node.data.sequence_items
        if sequence_items is not None:
            children, children_imports = await self._run_children(sequence_items, context)
            payload["children"] = [child.to_payload() for child in children]
            payload["childrenImports"] = [imp.model_dump(by_alias=True, exclude_none=True) for imp in children_imports]
            items_count = (node.data.plugin_settings or {}).get("itemsCount")
            payload["itemsCount"] = items_count if items_count is not None else len(children)

        result = await self._engine.get_execution_result(slug, payload, self._options.interface_name)
        code = result.code or ""
        imports = [*children_imports, *await self._manifest_imports(slug)]

        error = find_soft_error(code, self._options.error_sentinels)
        if error is not None:
            logger.warning("plugin_reported_error", node_id=node_id, slug=slug, error=error)
        else:
            logger.debug("plugin_executed", node_id=node_id, slug=slug, imports=len(imports))
        return PluginResult(node_id=node_id, code=code, imports=tuple(imports), error=error)

    async def _run_children(
        self,
        sequence_items: list[SequenceItem],
        context: GenerationContext,
    ) -> tuple[list[ChildInvocation], list[ImportDecl]]:
        """Execute sequence children in order.

        Settings come from the live canvas node when the child references
        one, otherwise from the serialized copy on the sequence item.
        """
        children: list[ChildInvocation] = []
        collected_imports: list[ImportDecl] = []

        for child in sequence_items:
            try:
                live = self._live_node(child.node_id)
                slug = self._child_slug(child, live)
                settings = self._child_settings(child, live)
                label = (live.data.label if live is not None else None) or child.name or None

                child_payload: dict[str, Any] = dict(settings)
                if label is not None:
                    child_payload["labelName"] = label

                result = await self._engine.get_execution_result(slug, child_payload, self._options.interface_name)
                code = result.code or ""
                children.append(
                    ChildInvocation(slug=slug, code=code, settings=settings, node_id=child.node_id, label_name=label)
                )

                error = find_soft_error(code, self._options.error_sentinels)
                if error is not None and child.node_id:
                    logger.warning("sequence_child_reported_error", node_id=child.node_id, slug=slug, error=error)
                    context.child_errors[child.node_id] = error

                collected_imports.extend(await self._manifest_imports(slug))
            except Exception as e:
                failed_slug = child.slug or child.plugin_id or "unknown"
                logger.error("sequence_child_failed", node_id=child.node_id, slug=failed_slug, error=str(e))
                children.append(
                    ChildInvocation(
                        slug=failed_slug,
                        code=f"# Error executing child {failed_slug}: {e}",
                        node_id=child.node_id,
                    )
                )
                if child.node_id:
                    context.child_errors[child.node_id] = str(e)

        return children, collected_imports

    def _live_node(self, node_id: str | None) -> WorkflowNode | None:
        if not node_id:
            return None
        classified = self._graph.get(node_id)
        return classified.node if classified is not None else None

    @staticmethod
    def _child_slug(child: SequenceItem, live: WorkflowNode | None) -> str:
        candidates = (
            live.data.plugin_id if live is not None else None,
            live.type if live is not None else None,
            child.serialized_slug,
        )
        for candidate in candidates:
            if candidate:
                return candidate
        raise PluginExecutionError(f"Sequence child '{child.node_id or child.name}' has no plugin slug")

    @staticmethod
    def _child_settings(child: SequenceItem, live: WorkflowNode | None) -> dict[str, Any]:
        candidates = (
            live.data.plugin_settings if live is not None else None,
            child.plugin_settings,
            child.settings,
        )
        for candidate in candidates:
            if candidate is not None:
                return candidate
        return {}

    async def _manifest_imports(self, slug: str) -> list[ImportDecl]:
        """Declared imports; a manifest that cannot be fetched declares none."""
        try:
            manifest = await self._engine.get_plugin_manifest(slug)
        except Exception as e:
            logger.debug("manifest_unavailable", slug=slug, error=str(e))
            return []
        return manifest.declared_imports()
