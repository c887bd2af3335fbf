# src/flowscribe/plugins/protocols.py
"""Protocol for in-process code generators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

from flowscribe.contracts import ImportDecl, WorkflowNode


@dataclass(frozen=True, slots=True)
class GeneratedCode:
    """Code fragment plus the imports it needs."""

    code: str
    imports: tuple[ImportDecl, ...] = ()


@runtime_checkable
class CodeGenerator(Protocol):
    """Generates code for one or more node type tags without an engine.

    Attributes:
        name: Unique generator name
        node_types: Type tags this generator claims
    """

    name: ClassVar[str]
    node_types: ClassVar[tuple[str, ...]]

    def generate(self, node: WorkflowNode) -> GeneratedCode:
        """Produce code for ``node``. May raise; the caller records the error."""
        ...
