# src/flowscribe/engine/factory.py
"""Engine construction and scoped acquisition."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog

from flowscribe.contracts import EngineConfigurationError, StorageBackend
from flowscribe.core.config import TranspilerConfig
from flowscribe.engine.local import LocalPluginEngine
from flowscribe.engine.protocols import ExecutionEngine
from flowscribe.engine.remote import RemotePluginEngine

logger = structlog.get_logger(__name__)


def resolve_backend(backend: StorageBackend, bucket_or_base_path: str) -> StorageBackend:
    """Resolve AUTO to LOCAL when the location is an existing directory."""
    if backend != StorageBackend.AUTO:
        return backend
    return StorageBackend.LOCAL if Path(bucket_or_base_path).is_dir() else StorageBackend.REMOTE


def create_engine(config: TranspilerConfig) -> ExecutionEngine:
    """Build the execution engine selected by the config's storage settings.

    Raises:
        EngineConfigurationError: If the selected backend cannot be built
    """
    storage = config.storage_config
    backend = resolve_backend(storage.backend, config.bucket_or_base_path)
    timeout = config.options.execution_timeout_seconds

    if backend == StorageBackend.LOCAL:
        engine: ExecutionEngine = LocalPluginEngine(
            Path(config.bucket_or_base_path),
            timeout_seconds=timeout,
            debug=config.debug,
        )
    else:
        if not storage.base_url:
            raise EngineConfigurationError(
                f"Remote plugin storage requires storage.base_url (bucket '{config.bucket_or_base_path}' is not a local directory)",
                field="storage.base_url",
            )
        engine = RemotePluginEngine(
            storage.base_url,
            config.bucket_or_base_path,
            api_token=storage.api_token,
            headers=storage.headers,
            timeout_seconds=timeout,
            debug=config.debug,
        )

    logger.debug("engine_created", backend=str(backend), location=config.bucket_or_base_path)
    return engine


@asynccontextmanager
async def engine_scope(
    config: TranspilerConfig,
    engine: ExecutionEngine | None = None,
) -> AsyncIterator[ExecutionEngine]:
    """Acquire an engine for one generation call and always dispose it.

    An injected engine is owned by the scope as well: it is disposed on exit.
    """
    acquired = engine if engine is not None else create_engine(config)
    try:
        yield acquired
    finally:
        await acquired.dispose()
