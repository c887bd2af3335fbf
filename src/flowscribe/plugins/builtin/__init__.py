# src/flowscribe/plugins/builtin/__init__.py
"""Generators shipped with flowscribe."""

from flowscribe.plugins.builtin.class_node import ClassGenerator
from flowscribe.plugins.builtin.custom_code import CustomCodeGenerator
from flowscribe.plugins.hookspecs import hookimpl
from flowscribe.plugins.protocols import CodeGenerator


class BuiltinGenerators:
    """Hook implementation registering the built-in generators."""

    @hookimpl
    def flowscribe_get_generators(self) -> list[type[CodeGenerator]]:
        return [CustomCodeGenerator, ClassGenerator]


__all__ = ["BuiltinGenerators", "ClassGenerator", "CustomCodeGenerator"]
