# src/flowscribe/plugins/manager.py
"""Generator manager for discovery, registration, and lookup.

Uses pluggy for hook-based registration.
"""

from typing import Any

import pluggy

from flowscribe.plugins.hookspecs import PROJECT_NAME, FlowscribeGeneratorSpec
from flowscribe.plugins.protocols import CodeGenerator


class GeneratorManager:
    """Maps node type tags to in-process generators.

    Usage:
        manager = GeneratorManager()
        manager.register_builtin_generators()

        generator = manager.get_generator_for_type("CustomCode")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FlowscribeGeneratorSpec)
        self._by_type: dict[str, CodeGenerator] = {}

    def register_builtin_generators(self) -> None:
        """Register the generators shipped with flowscribe."""
        from flowscribe.plugins.builtin import BuiltinGenerators

        self.register(BuiltinGenerators())

    def load_entrypoint_generators(self) -> int:
        """Register generators exposed under the 'flowscribe' entry-point group.

        Returns:
            Number of distributions loaded
        """
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        self._refresh_caches()
        return count

    def register(self, plugin: Any) -> None:
        """Register a plugin object implementing flowscribe_get_generators."""
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Rebuild the type-tag lookup.

        Raises:
            ValueError: If two generators claim the same type tag
        """
        by_type: dict[str, CodeGenerator] = {}
        for generator_classes in self._pm.hook.flowscribe_get_generators():
            for cls in generator_classes:
                instance = cls()
                for node_type in cls.node_types:
                    if node_type in by_type:
                        raise ValueError(
                            f"Duplicate generator for node type '{node_type}': "
                            f"'{cls.name}' conflicts with '{by_type[node_type].name}'"
                        )
                    by_type[node_type] = instance
        self._by_type = by_type

    def get_generator_for_type(self, node_type: str | None) -> CodeGenerator | None:
        if node_type is None:
            return None
        return self._by_type.get(node_type)

    def handled_types(self) -> frozenset[str]:
        return frozenset(self._by_type)
