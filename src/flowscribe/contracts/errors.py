"""Exception hierarchy for flowscribe.

Per-node failures during generation are converted to error records and never
escape generate_code(). The exceptions below are what the engines raise
internally, plus the few conditions that do abort a generation call:
invalid input and an engine that cannot be constructed.
"""

from __future__ import annotations


class FlowscribeError(Exception):
    """Base class for all flowscribe errors."""


class WorkflowValidationError(FlowscribeError, ValueError):
    """Raised when caller-supplied nodes/edges fail boundary validation."""


class EngineError(FlowscribeError):
    """Base class for execution engine failures."""

    def __init__(self, message: str, *, slug: str | None = None) -> None:
        self.slug = slug
        super().__init__(message)


class EngineConfigurationError(EngineError):
    """Raised when an engine cannot be constructed from the given settings.

    This is the only engine error that propagates out of generate_code().
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class PluginNotFoundError(EngineError):
    """Raised when a plugin slug cannot be resolved by the engine."""

    def __init__(self, slug: str, location: str) -> None:
        self.location = location
        super().__init__(f"Plugin '{slug}' not found in '{location}'", slug=slug)


class PluginExecutionError(EngineError):
    """Raised when a plugin's code generator fails to run.

    Attributes:
        slug: Plugin that failed
        status_code: HTTP status from a remote engine, if any
    """

    def __init__(self, message: str, *, slug: str | None = None, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, slug=slug)
