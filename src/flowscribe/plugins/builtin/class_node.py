# src/flowscribe/plugins/builtin/class_node.py
"""Python class definitions built from the class editor on the canvas."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from flowscribe.contracts import EmitsConfig, ImportDecl, WorkflowNode
from flowscribe.plugins.builtin.custom_code import CustomImport, replace_variable_refs
from flowscribe.plugins.protocols import GeneratedCode

_NO_BASE_CLASS = "No base class"
_TORCH_MODULE = "torch.nn.Module"
_TORCH_DATASET = "torch.utils.data.Dataset"

# Editor-only marker placed above code blocks for autocompletion
_SELF_DECORATOR = "@classnodeself"

_INDENT = "    "


class ClassParameter(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    name: str
    type: str = ""
    value: str = ""
    default_value: str | None = Field(default=None, alias="defaultValue")
    property_name: str | None = Field(default=None, alias="propertyName")

    def signature(self) -> str:
        return f"{self.name}={self.default_value}" if self.default_value else self.name


class ConstructorItem(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    id: str = ""
    type: Literal["parameter", "code"]
    parameter: ClassParameter | None = None
    code: str | None = None


class ClassMethod(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}

    name: str
    parameters: list[ClassParameter] = Field(default_factory=list)
    code: str = ""


class BaseClassRef(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    name: str
    import_path: str | None = Field(default=None, alias="importPath")


class ClassNodeData(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    class_name: str = Field(default="MyClass", alias="className")
    base_class: BaseClassRef | None = Field(default=None, alias="baseClass")
    constructor_parameters: list[ClassParameter] = Field(default_factory=list, alias="constructorParameters")
    constructor_items: list[ConstructorItem] = Field(default_factory=list, alias="constructorItems")
    methods: list[ClassMethod] = Field(default_factory=list)
    custom_imports: list[CustomImport] = Field(default_factory=list, alias="customImports")
    emits_config: EmitsConfig | None = Field(default=None, alias="emitsConfig")

    @property
    def effective_base(self) -> BaseClassRef | None:
        if self.base_class is None or self.base_class.name == _NO_BASE_CLASS:
            return None
        return self.base_class


def _strip_self_decorators(code: str) -> str:
    return "\n".join(line for line in code.split("\n") if line.strip() != _SELF_DECORATOR)


def _stub_methods(base: BaseClassRef | None, defined: set[str]) -> list[ClassMethod]:
    """Methods a well-known base class expects, unless already defined."""
    if base is None:
        return []
    stubs: list[ClassMethod] = []
    if base.name == _TORCH_MODULE and "forward" not in defined:
        stubs.append(
            ClassMethod(
                name="forward",
                parameters=[ClassParameter(name="x")],
                code="# Define the forward pass of your neural network\npass",
            )
        )
    elif base.name == _TORCH_DATASET:
        if "__len__" not in defined:
            stubs.append(ClassMethod(name="__len__", code="# Return the size of the dataset\npass"))
        if "__getitem__" not in defined:
            stubs.append(
                ClassMethod(
                    name="__getitem__",
                    parameters=[ClassParameter(name="idx")],
                    code="# Return a single item from the dataset\npass",
                )
            )
    return stubs


def render_class(data: ClassNodeData) -> str:
    """Render the class source for a class node."""
    base = data.effective_base
    lines = [f"class {data.class_name}({base.name}):" if base else f"class {data.class_name}:"]

    params = list(data.constructor_parameters)
    params.extend(item.parameter for item in data.constructor_items if item.type == "parameter" and item.parameter)
    lines.append(f"{_INDENT}def __init__({', '.join(['self', *(p.signature() for p in params)])}):")
    if base:
        lines.append(f"{_INDENT * 2}super().__init__()")

    body: list[str] = [f"self.{p.property_name or p.name} = {p.name}" for p in data.constructor_parameters]
    for item in data.constructor_items:
        if item.type == "parameter" and item.parameter:
            body.append(f"self.{item.parameter.property_name or item.parameter.name} = {item.parameter.name}")
        elif item.type == "code" and item.code:
            body.extend(line for line in _strip_self_decorators(item.code).split("\n") if line.strip())
    if body:
        lines.extend(f"{_INDENT * 2}{line}" for line in body)
    else:
        lines.append(f"{_INDENT * 2}pass")

    methods = [*_stub_methods(base, {m.name for m in data.methods}), *data.methods]
    for method in methods:
        lines.append("")
        signature = ", ".join(["self", *(p.signature() for p in method.parameters)])
        lines.append(f"{_INDENT}def {method.name}({signature}):")
        if method.code.strip():
            lines.extend(f"{_INDENT * 2}{line}" for line in method.code.split("\n"))
        else:
            lines.append(f"{_INDENT * 2}pass")

    return "\n".join(lines)


def class_imports(data: ClassNodeData) -> list[ImportDecl]:
    """Declared imports plus the base class import when not already declared."""
    imports: list[ImportDecl] = []
    if data.emits_config is not None:
        imports.extend(data.emits_config.imports)
    imports.extend(imp.to_decl() for imp in data.custom_imports)

    base = data.effective_base
    if base is None:
        return imports

    if base.name in (_TORCH_MODULE, _TORCH_DATASET):
        base_import = ImportDecl(path="torch")
    elif base.import_path:
        base_import = ImportDecl(path=base.import_path, items=[base.name])
    else:
        return imports

    already = any(
        imp.path == base_import.path and (not base_import.items or base.name in (imp.items or []))
        for imp in imports
    )
    if not already:
        imports.insert(0, base_import)
    return imports


class ClassGenerator:
    """Generates a class definition from structured node data."""

    name: ClassVar[str] = "class_node"
    node_types: ClassVar[tuple[str, ...]] = ("ClassNode", "@workflow/core/ClassNode")

    def generate(self, node: WorkflowNode) -> GeneratedCode:
        data = ClassNodeData.model_validate(node.data.extra_fields())
        return GeneratedCode(code=replace_variable_refs(render_class(data)), imports=tuple(class_imports(data)))
