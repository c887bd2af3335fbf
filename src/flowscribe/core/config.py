# src/flowscribe/core/config.py
"""
Configuration schema and loading for flowscribe.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from flowscribe.contracts import (
    DEFAULT_INTERFACE_NAME,
    StorageBackend,
    WorkflowEdge,
    WorkflowNode,
    WorkflowValidationError,
)

# Code returned by a plugin that starts with one of these (after stripping
# whitespace) is reported as an error even though the engine did not raise.
DEFAULT_ERROR_SENTINELS: tuple[str, ...] = ("Error:", "# Error")


class NodeTypeVocabulary(BaseModel):
    """Type tags that denote the six structural roles.

    A tag denotes a role when it matches one of the role's markers exactly,
    or when it equals "{reserved_namespace}/{Role}Node" (for example
    "@workflow/core/StartNode"). Every other tag denotes a plugin.

    Example YAML:
        vocabulary:
          reserved_namespace: "@acme/core"
          nested: ["Nested", "Subflow"]
    """

    model_config = {"frozen": True}

    start: tuple[str, ...] = Field(default=("Start",), description="Exact tags for route entry markers")
    end: tuple[str, ...] = Field(default=("End",), description="Exact tags for route exit markers")
    branch: tuple[str, ...] = Field(default=("Branch",), description="Exact tags for branch nodes")
    nested: tuple[str, ...] = Field(default=("Nested",), description="Exact tags for nested-scope placeholders")
    multiplexer: tuple[str, ...] = Field(default=("Multiplexer",), description="Exact tags for multiplexers")
    demultiplexer: tuple[str, ...] = Field(default=("Demultiplexer",), description="Exact tags for demultiplexers")
    reserved_namespace: str | None = Field(
        default="@workflow/core",
        description="Namespace whose '<ns>/<Role>Node' tags also denote structural roles",
    )

    @field_validator("reserved_namespace")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.rstrip("/")
        if not v:
            raise ValueError("reserved_namespace cannot be empty; use null to disable it")
        return v


class StorageSettings(BaseModel):
    """Where the execution engine loads plugins from.

    backend:
    - local: plugins are directories under bucket_or_base_path
    - remote: plugins are served by a plugin service at base_url
    - auto: local when bucket_or_base_path is an existing directory, else remote
    """

    model_config = {"frozen": True, "populate_by_name": True}

    backend: StorageBackend = Field(default=StorageBackend.AUTO, description="Plugin storage backend")
    base_url: str | None = Field(default=None, alias="baseUrl", description="Plugin service URL (remote backend)")
    api_token: str | None = Field(default=None, alias="apiToken", description="Bearer token for the plugin service")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra headers for the plugin service")

    @model_validator(mode="after")
    def validate_remote_has_url(self) -> "StorageSettings":
        if self.backend == StorageBackend.REMOTE and not self.base_url:
            raise ValueError("storage.base_url is required when backend is 'remote'")
        return self


class GenerationOptions(BaseModel):
    """Knobs for one generation call that are not part of the graph."""

    model_config = {"frozen": True, "populate_by_name": True}

    execution_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        description="Per-plugin timeout handed to the execution engine (None disables)",
    )
    interface_name: str = Field(
        default=DEFAULT_INTERFACE_NAME,
        min_length=1,
        description="Interface the engine checks plugin exports against",
    )
    error_sentinels: tuple[str, ...] = Field(
        default=DEFAULT_ERROR_SENTINELS,
        description="Prefixes marking returned code as a soft error",
    )
    vocabulary: NodeTypeVocabulary = Field(default_factory=NodeTypeVocabulary)

    @field_validator("error_sentinels")
    @classmethod
    def validate_sentinels_not_blank(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """A blank sentinel would flag every result as an error."""
        if any(not s.strip() for s in v):
            raise ValueError("error_sentinels entries must be non-blank")
        return v


class TranspilerConfig(BaseModel):
    """Input of one generate_code() call.

    Accepts the camelCase wire names used by canvas clients
    (storageConfig, bucketOrBasePath) as well as snake_case.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    nodes: list[WorkflowNode]
    edges: list[WorkflowEdge] = Field(default_factory=list)
    storage_config: StorageSettings = Field(default_factory=StorageSettings, alias="storageConfig")
    bucket_or_base_path: str = Field(alias="bucketOrBasePath", min_length=1)
    debug: bool = False
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class FlowscribeSettings(BaseModel):
    """Top-level flowscribe configuration, typically loaded from YAML.

    Example YAML:
        bucket_or_base_path: ./plugins
        storage:
          backend: local
        generation:
          execution_timeout_seconds: 10
    """

    model_config = {"frozen": True}

    storage: StorageSettings = Field(default_factory=StorageSettings)
    bucket_or_base_path: str | None = Field(default=None, description="Plugin bucket name or local plugin directory")
    debug: bool = Field(default=False, description="Verbose engine and transpiler logging")
    generation: GenerationOptions = Field(default_factory=GenerationOptions)

    def to_transpiler_config(self, nodes: list[WorkflowNode], edges: list[WorkflowEdge]) -> TranspilerConfig:
        """Bind a workflow graph to these settings.

        Raises:
            WorkflowValidationError: If no plugin location is configured
        """
        if not self.bucket_or_base_path:
            raise WorkflowValidationError("bucket_or_base_path must be configured to generate code")
        return TranspilerConfig(
            nodes=nodes,
            edges=edges,
            storage_config=self.storage,
            bucket_or_base_path=self.bucket_or_base_path,
            debug=self.debug,
            options=self.generation,
        )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # Unset with no default: leave the reference for validation to reject
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_env_keys(value: Any) -> Any:
    """Lowercase nested keys that arrive upper-cased from FLOWSCRIBE_*__* overrides.

    Keys written in YAML keep their case so camelCase aliases (baseUrl,
    apiToken) still reach the models.
    """
    if isinstance(value, dict):
        return {(k.lower() if isinstance(k, str) and k.isupper() else k): _lower_env_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_env_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> FlowscribeSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FLOWSCRIBE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: FLOWSCRIBE_STORAGE__BASE_URL for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated FlowscribeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FLOWSCRIBE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    # Dynaconf upper-cases top-level keys
    raw_config = {k.lower(): _lower_env_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _expand_env_vars(raw_config)

    return FlowscribeSettings(**raw_config)


def load_workflow_file(workflow_path: Path) -> tuple[list[WorkflowNode], list[WorkflowEdge]]:
    """Read a canvas export ({"nodes": [...], "edges": [...]}) from JSON.

    Raises:
        FileNotFoundError: If the file doesn't exist
        WorkflowValidationError: If the JSON is malformed or fails validation
    """
    if not workflow_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {workflow_path}")

    try:
        raw = json.loads(workflow_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise WorkflowValidationError(f"Workflow file is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise WorkflowValidationError("Workflow file must contain a JSON object with 'nodes' and 'edges'")

    try:
        nodes = [WorkflowNode.model_validate(n) for n in raw.get("nodes") or []]
        edges = [WorkflowEdge.model_validate(e) for e in raw.get("edges") or []]
    except ValidationError as e:
        raise WorkflowValidationError(f"Invalid workflow: {e}") from e

    return nodes, edges
