# src/flowscribe/transpiler/generate.py
"""generate_code(): workflow graph in, generated artifacts out.

Pipeline:
    routes -> paths per route -> nested expansion -> plugin execution
    -> artifact assembly + error collection
"""

from __future__ import annotations

import asyncio

import structlog

from flowscribe.contracts import Path, TranspilerResult
from flowscribe.core.classification import NodeClassifier
from flowscribe.core.config import TranspilerConfig
from flowscribe.core.graph import WorkflowGraph, find_all_paths
from flowscribe.engine.factory import engine_scope
from flowscribe.engine.protocols import ExecutionEngine
from flowscribe.plugins.manager import GeneratorManager
from flowscribe.transpiler.assembler import ArtifactAssembler
from flowscribe.transpiler.errors import ErrorCollector
from flowscribe.transpiler.executor import PluginExecutor

logger = structlog.get_logger(__name__)


def build_graph(config: TranspilerConfig) -> WorkflowGraph:
    """Classify the config's nodes once using its vocabulary."""
    classifier = NodeClassifier(config.options.vocabulary)
    return WorkflowGraph(config.nodes, config.edges, classifier=classifier)


def default_generators() -> GeneratorManager:
    """Generator manager with the built-in generators registered."""
    manager = GeneratorManager()
    manager.register_builtin_generators()
    return manager


def find_workflow_paths(config: TranspilerConfig) -> list[Path]:
    """Expanded paths of a workflow, without executing anything."""
    return find_all_paths(build_graph(config))


async def generate_code(
    config: TranspilerConfig,
    *,
    engine: ExecutionEngine | None = None,
    generators: GeneratorManager | None = None,
) -> TranspilerResult:
    """Generate one artifact per expanded path.

    The engine (injected or built from the config's storage settings) is
    disposed before this returns or raises.

    Raises:
        EngineConfigurationError: If no engine can be built for the config
    """
    generators = generators if generators is not None else default_generators()

    async with engine_scope(config, engine) as acquired:
        graph = build_graph(config)
        paths = find_all_paths(graph)
        logger.debug("paths_found", paths=len(paths), nodes=graph.node_count, edges=graph.edge_count)

        executor = PluginExecutor(acquired, graph, options=config.options, generators=generators)
        context = await executor.run(paths)

        artifacts = ArtifactAssembler(context.results).assemble(paths)

        collector = ErrorCollector(graph)
        errors_by_node_id = collector.by_node_id(context.results, context.child_errors)
        errors_by_artifact_id = collector.by_artifact_id(artifacts, errors_by_node_id)

    if errors_by_node_id:
        logger.warning(
            "generation_completed_with_errors",
            artifacts=len(artifacts),
            failed_nodes=sorted(errors_by_node_id),
        )
    else:
        logger.debug("generation_completed", artifacts=len(artifacts))

    return TranspilerResult(
        artifacts={a.artifact_id: a.code for a in artifacts},
        paths={a.artifact_id: list(a.path.nodes) for a in artifacts},
        errors_by_node_id=errors_by_node_id or None,
        errors_by_artifact_id=errors_by_artifact_id or None,
    )


def generate_code_sync(
    config: TranspilerConfig,
    *,
    engine: ExecutionEngine | None = None,
    generators: GeneratorManager | None = None,
) -> TranspilerResult:
    """Blocking wrapper around generate_code() for callers without a loop."""
    return asyncio.run(generate_code(config, engine=engine, generators=generators))
