# src/flowscribe/engine/__init__.py
"""Execution engines: the collaborators that run plugin code generators."""

from flowscribe.engine.factory import create_engine, engine_scope, resolve_backend
from flowscribe.engine.local import LocalPluginEngine
from flowscribe.engine.protocols import ExecutionEngine
from flowscribe.engine.remote import RemotePluginEngine

__all__ = [
    "ExecutionEngine",
    "LocalPluginEngine",
    "RemotePluginEngine",
    "create_engine",
    "engine_scope",
    "resolve_backend",
]
