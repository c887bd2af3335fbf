# src/flowscribe/plugins/builtin/custom_code.py
"""Custom code blocks typed directly on the canvas."""

from __future__ import annotations

import re
from typing import ClassVar

from pydantic import BaseModel, Field

from flowscribe.contracts import EmitsConfig, ImportDecl, WorkflowNode
from flowscribe.plugins.protocols import GeneratedCode

# Canvas code refers to upstream variables as $name
_VARIABLE_REF = re.compile(r"\$(\w+)")


def replace_variable_refs(code: str) -> str:
    """Rewrite every ``$name`` reference to ``name``."""
    return _VARIABLE_REF.sub(r"\1", code)


class CustomImport(BaseModel):
    """Import typed by the user in the node's import editor."""

    model_config = {"frozen": True, "extra": "ignore"}

    path: str
    items: list[str] = Field(default_factory=list)
    alias: str | None = None

    def to_decl(self) -> ImportDecl:
        return ImportDecl(path=self.path, items=list(self.items) or None, alias=self.alias)


class CustomCodeData(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    code: str = ""
    custom_imports: list[CustomImport] = Field(default_factory=list, alias="customImports")
    emits_config: EmitsConfig | None = Field(default=None, alias="emitsConfig")


class CustomCodeGenerator:
    """Emits the node's code verbatim apart from variable references."""

    name: ClassVar[str] = "custom_code"
    node_types: ClassVar[tuple[str, ...]] = ("CustomCode", "@workflow/core/CustomCodeNode")

    def generate(self, node: WorkflowNode) -> GeneratedCode:
        data = CustomCodeData.model_validate(node.data.extra_fields())
        imports: list[ImportDecl] = []
        if data.emits_config is not None:
            imports.extend(data.emits_config.imports)
        imports.extend(imp.to_decl() for imp in data.custom_imports)
        return GeneratedCode(code=replace_variable_refs(data.code), imports=tuple(imports))
