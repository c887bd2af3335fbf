# src/flowscribe/plugins/__init__.py
"""In-process code generators registered through pluggy."""

from flowscribe.plugins.hookspecs import hookimpl
from flowscribe.plugins.manager import GeneratorManager
from flowscribe.plugins.protocols import CodeGenerator, GeneratedCode

__all__ = ["CodeGenerator", "GeneratedCode", "GeneratorManager", "hookimpl"]
