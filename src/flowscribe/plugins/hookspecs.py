# src/flowscribe/plugins/hookspecs.py
"""pluggy hook specifications for in-process code generators.

In-process generators handle node types whose code is derived directly from
node data (custom code blocks, class definitions) and never reaches the
execution engine.

Usage (implementing a plugin):
    from flowscribe.plugins.hookspecs import hookimpl

    class MyGenerators:
        @hookimpl
        def flowscribe_get_generators(self):
            return [MyGenerator]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from flowscribe.plugins.protocols import CodeGenerator

PROJECT_NAME = "flowscribe"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FlowscribeGeneratorSpec:
    """Hook specifications for in-process generators."""

    @hookspec
    def flowscribe_get_generators(self) -> list[type["CodeGenerator"]]:  # type: ignore[empty-body]
        """Return generator classes (not instances)."""
