"""Data shapes exchanged with the execution engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from flowscribe.contracts.workflow import ImportDecl

# Interface name the engine checks the plugin's exported class against.
DEFAULT_INTERFACE_NAME = "CodeGenerator"


class ExecutionResult(BaseModel):
    """Result of running one plugin's code generator.

    Engines may attach extra keys (timings, warnings); only ``code`` is read.
    A null ``code`` is read as empty output.
    """

    model_config = {"frozen": True, "extra": "allow"}

    code: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def null_code_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class EmitsConfig(BaseModel):
    model_config = {"frozen": True, "extra": "allow"}

    imports: list[ImportDecl] = Field(default_factory=list)

    @field_validator("imports", mode="before")
    @classmethod
    def skip_entries_without_path(cls, v: Any) -> Any:
        """Drop declarations with no module path; the rest still apply."""
        if not isinstance(v, list):
            return v
        return [entry for entry in v if not isinstance(entry, dict) or entry.get("path")]


class FrontendConfigs(BaseModel):
    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    emits: EmitsConfig | None = None


class PluginManifest(BaseModel):
    """Plugin-published metadata.

    Import declarations may sit under ``emits`` or under
    ``frontendConfigs.emits``; the first non-empty list wins.
    """

    model_config = {"frozen": True, "extra": "allow", "populate_by_name": True}

    emits: EmitsConfig | None = None
    frontend_configs: FrontendConfigs | None = Field(default=None, alias="frontendConfigs")

    def declared_imports(self) -> list[ImportDecl]:
        if self.emits is not None and self.emits.imports:
            return list(self.emits.imports)
        if self.frontend_configs is not None and self.frontend_configs.emits is not None:
            return list(self.frontend_configs.emits.imports)
        return []
