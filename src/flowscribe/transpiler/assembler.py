# src/flowscribe/transpiler/assembler.py
"""Artifact assembly: one code unit per expanded path."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from flowscribe.contracts import ArtifactID, AssembledArtifact, ImportDecl, NodeID, Path, PluginResult
from flowscribe.transpiler.imports import build_import_header


def format_code(code: str) -> str:
    """Collapse runs of blank lines to one and trim the result."""
    lines: list[str] = []
    previous_blank = False
    for line in code.split("\n"):
        blank = not line.strip()
        if blank and previous_blank:
            continue
        lines.append(line)
        previous_blank = blank
    return "\n".join(lines).strip()


def group_by_end_node(paths: Iterable[Path]) -> dict[NodeID, list[Path]]:
    """Paths grouped by terminal node, both in discovery order."""
    groups: dict[NodeID, list[Path]] = {}
    for path in paths:
        groups.setdefault(path.end_node_id, []).append(path)
    return groups


def artifact_ids(paths: Iterable[Path]) -> list[tuple[ArtifactID, Path]]:
    """Pair each path with its artifact id.

    A terminal node reached by one path names its artifact directly; one
    reached by several yields "<end>_path1", "<end>_path2", ...
    """
    named: list[tuple[ArtifactID, Path]] = []
    for end_node_id, group in group_by_end_node(paths).items():
        if len(group) == 1:
            named.append((ArtifactID(end_node_id), group[0]))
            continue
        for index, path in enumerate(group, start=1):
            named.append((ArtifactID(f"{end_node_id}_path{index}"), path))
    return named


class ArtifactAssembler:
    """Concatenates plugin output along each path under a merged import header."""

    def __init__(self, results: Mapping[NodeID, PluginResult]) -> None:
        self._results = results

    def render(self, path: Path) -> str:
        chunks: list[str] = []
        imports: list[ImportDecl] = []
        for node_id in path.nodes:
            result = self._results.get(node_id)
            if result is None:
                continue
            if result.code:
                chunks.append(result.code)
            imports.extend(result.imports)

        header = build_import_header(imports)
        body = "\n\n".join(chunks)
        if header and chunks:
            combined = "\n".join([header, "", body])
        elif header:
            combined = header
        else:
            combined = body
        return format_code(combined)

    def assemble(self, paths: Iterable[Path]) -> list[AssembledArtifact]:
        return [
            AssembledArtifact(artifact_id=artifact_id, code=self.render(path), path=path)
            for artifact_id, path in artifact_ids(paths)
        ]
