# src/flowscribe/transpiler/imports.py
"""Import header construction.

Declarations are merged in encounter order:

- whole-module imports (``import torch``, ``import numpy as np``) all land on
  one comma-joined statement, repeats included;
- named imports are grouped per module in first-encounter order, so
  ``from torch.nn import Linear`` and ``from torch.nn import ReLU as R``
  render as ``from torch.nn import Linear, ReLU as R``.

The whole-module statement comes first, then one statement per module.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from flowscribe.contracts import ImportDecl


@dataclass(slots=True)
class _NamedGroup:
    items: list[str] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)

    def add(self, decl: ImportDecl) -> None:
        for item in decl.items or ():
            if item not in self.items:
                self.items.append(item)
        self.aliases.update(decl.as_map)

    def render(self, module: str) -> str:
        names = [f"{item} as {self.aliases[item]}" if item in self.aliases else item for item in self.items]
        return f"from {module} import {', '.join(names)}"


def build_import_header(declarations: Iterable[ImportDecl]) -> str:
    """Render import declarations as a header block.

    Returns an empty string when there is nothing to import.

    >>> from flowscribe.contracts import ImportDecl
    >>> print(build_import_header([
    ...     ImportDecl(path="torch"),
    ...     ImportDecl(path="torch.nn", items=["Linear"]),
    ...     ImportDecl(path="numpy", alias="np"),
    ...     ImportDecl.model_validate({"path": "torch.nn", "items": ["ReLU"], "as": {"ReLU": "R"}}),
    ... ]))
    import torch, numpy as np
    from torch.nn import Linear, ReLU as R
    """
    basic: list[str] = []
    named: dict[str, _NamedGroup] = {}

    for decl in declarations:
        if not decl.path:
            continue
        if not decl.is_named:
            basic.append(f"{decl.path} as {decl.alias}" if decl.alias else decl.path)
            continue
        named.setdefault(decl.path, _NamedGroup()).add(decl)

    lines: list[str] = []
    if basic:
        lines.append(f"import {', '.join(basic)}")
    lines.extend(group.render(module) for module, group in named.items())
    return "\n".join(lines)
