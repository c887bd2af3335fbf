"""Node kinds and other closed vocabularies used across package boundaries.

Classification from raw type tags to NodeKind happens once, when the
WorkflowGraph is built. Nothing downstream compares type strings.
"""

from enum import StrEnum


class NodeKind(StrEnum):
    """Role of a node in the workflow graph.

    Values:
        START: Entry marker of a route
        END: Exit marker of a route; one artifact per path ending here
        BRANCH: Fans out over numbered ``next-<N>`` handles
        NESTED: Placeholder whose body is the child route named after it
        MULTIPLEXER: Structural fan-in/fan-out helper
        DEMULTIPLEXER: Structural fan-in/fan-out helper
        PLUGIN: Code-bearing node, executed once per generation call
        UNTYPED: No type tag and no plugin id; topology only
    """

    START = "start"
    END = "end"
    BRANCH = "branch"
    NESTED = "nested"
    MULTIPLEXER = "multiplexer"
    DEMULTIPLEXER = "demultiplexer"
    PLUGIN = "plugin"
    UNTYPED = "untyped"


STRUCTURAL_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.START,
        NodeKind.END,
        NodeKind.BRANCH,
        NodeKind.NESTED,
        NodeKind.MULTIPLEXER,
        NodeKind.DEMULTIPLEXER,
    }
)


class StorageBackend(StrEnum):
    """Where the execution engine loads plugins from."""

    LOCAL = "local"
    REMOTE = "remote"
    AUTO = "auto"


class HandleName(StrEnum):
    """Reserved edge handle names that carry flow semantics."""

    NEXT = "next"
    PREV = "prev"
    NESTED_INPUT = "nested-input"
    NESTED_OUTPUT = "nested-output"
