"""Tests for settings models and loaders."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from flowscribe.contracts import StorageBackend, WorkflowValidationError


class TestNodeTypeVocabulary:
    def test_defaults(self) -> None:
        """Default markers and namespace match the canvas vocabulary."""
        from flowscribe.core.config import NodeTypeVocabulary

        vocab = NodeTypeVocabulary()
        assert vocab.start == ("Start",)
        assert vocab.nested == ("Nested",)
        assert vocab.reserved_namespace == "@workflow/core"

    def test_trailing_slash_stripped(self) -> None:
        """A trailing slash on the namespace is removed."""
        from flowscribe.core.config import NodeTypeVocabulary

        assert NodeTypeVocabulary(reserved_namespace="@acme/core/").reserved_namespace == "@acme/core"

    def test_empty_namespace_rejected(self) -> None:
        """A namespace that strips to nothing is rejected."""
        from flowscribe.core.config import NodeTypeVocabulary

        with pytest.raises(ValidationError, match="reserved_namespace"):
            NodeTypeVocabulary(reserved_namespace="/")

    def test_namespace_can_be_disabled(self) -> None:
        """The namespace may be set to None."""
        from flowscribe.core.config import NodeTypeVocabulary

        assert NodeTypeVocabulary(reserved_namespace=None).reserved_namespace is None


class TestStorageSettings:
    def test_remote_requires_base_url(self) -> None:
        """The remote backend needs a base_url."""
        from flowscribe.core.config import StorageSettings

        with pytest.raises(ValidationError, match="base_url"):
            StorageSettings(backend=StorageBackend.REMOTE)

    def test_accepts_camel_case(self) -> None:
        """baseUrl and apiToken aliases are accepted."""
        from flowscribe.core.config import StorageSettings

        storage = StorageSettings.model_validate({"backend": "remote", "baseUrl": "http://svc", "apiToken": "t"})
        assert storage.base_url == "http://svc"
        assert storage.api_token == "t"


class TestGenerationOptions:
    def test_default_sentinels(self) -> None:
        """Default error sentinels are "Error:" and "# Error"."""
        from flowscribe.core.config import GenerationOptions

        assert GenerationOptions().error_sentinels == ("Error:", "# Error")

    def test_blank_sentinel_rejected(self) -> None:
        """Blank sentinels are rejected."""
        from flowscribe.core.config import GenerationOptions

        with pytest.raises(ValidationError, match="non-blank"):
            GenerationOptions(error_sentinels=("Error:", "  "))

    def test_timeout_must_be_positive(self) -> None:
        """A zero timeout is rejected."""
        from flowscribe.core.config import GenerationOptions

        with pytest.raises(ValidationError):
            GenerationOptions(execution_timeout_seconds=0)

    def test_timeout_can_be_disabled(self) -> None:
        """A None timeout disables the limit."""
        from flowscribe.core.config import GenerationOptions

        assert GenerationOptions(execution_timeout_seconds=None).execution_timeout_seconds is None


class TestTranspilerConfig:
    def test_wire_names(self) -> None:
        """camelCase wire names populate the config."""
        from flowscribe.core.config import TranspilerConfig

        config = TranspilerConfig.model_validate(
            {
                "nodes": [{"id": "S", "type": "Start"}],
                "edges": [],
                "storageConfig": {"backend": "local"},
                "bucketOrBasePath": "./plugins",
                "debug": True,
            }
        )
        assert config.bucket_or_base_path == "./plugins"
        assert config.storage_config.backend == StorageBackend.LOCAL
        assert config.debug is True

    def test_bucket_required(self) -> None:
        """An empty bucketOrBasePath is rejected."""
        from flowscribe.core.config import TranspilerConfig

        with pytest.raises(ValidationError):
            TranspilerConfig.model_validate({"nodes": [], "bucketOrBasePath": ""})

    def test_frozen(self) -> None:
        """TranspilerConfig is immutable."""
        from flowscribe.core.config import TranspilerConfig

        config = TranspilerConfig(nodes=[], bucket_or_base_path="b")
        with pytest.raises(ValidationError):
            config.debug = True  # type: ignore[misc]


class TestFlowscribeSettings:
    def test_to_transpiler_config(self) -> None:
        """Settings carry location, debug and options into the config."""
        from flowscribe.core.config import FlowscribeSettings, GenerationOptions

        settings = FlowscribeSettings(
            bucket_or_base_path="plugins",
            debug=True,
            generation=GenerationOptions(interface_name="Gen"),
        )
        config = settings.to_transpiler_config([], [])
        assert config.bucket_or_base_path == "plugins"
        assert config.debug is True
        assert config.options.interface_name == "Gen"

    def test_missing_location_raises(self) -> None:
        """No plugin location raises WorkflowValidationError."""
        from flowscribe.core.config import FlowscribeSettings

        with pytest.raises(WorkflowValidationError, match="bucket_or_base_path"):
            FlowscribeSettings().to_transpiler_config([], [])


class TestLoadSettings:
    def test_loads_yaml(self, tmp_path: Path) -> None:
        """YAML settings load into nested models."""
        from flowscribe.core.config import load_settings

        path = tmp_path / "settings.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "bucket_or_base_path": "./plugins",
                    "storage": {"backend": "local"},
                    "generation": {"execution_timeout_seconds": 5, "vocabulary": {"nested": ["Subflow"]}},
                }
            )
        )

        settings = load_settings(path)

        assert settings.bucket_or_base_path == "./plugins"
        assert settings.storage.backend == StorageBackend.LOCAL
        assert settings.generation.execution_timeout_seconds == 5
        assert settings.generation.vocabulary.nested == ("Subflow",)

    def test_expands_env_vars(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} and ${VAR:-default} references are expanded."""
        from flowscribe.core.config import load_settings

        monkeypatch.setenv("PLUGIN_TOKEN", "secret")
        path = tmp_path / "settings.yaml"
        path.write_text(
            "bucket_or_base_path: ${PLUGIN_BUCKET:-workflow-plugins}\n"
            "storage:\n"
            "  backend: remote\n"
            "  base_url: http://plugins.local\n"
            "  api_token: ${PLUGIN_TOKEN}\n"
        )

        settings = load_settings(path)

        assert settings.bucket_or_base_path == "workflow-plugins"
        assert settings.storage.api_token == "secret"

    def test_camel_case_storage_keys(self, tmp_path: Path) -> None:
        """camelCase storage keys in YAML reach the storage model."""
        from flowscribe.core.config import load_settings

        path = tmp_path / "settings.yaml"
        path.write_text(
            "bucket_or_base_path: workflow-plugins\n"
            "storage:\n"
            "  backend: remote\n"
            "  baseUrl: http://plugins.local\n"
            "  apiToken: secret\n"
        )

        settings = load_settings(path)

        assert settings.storage.base_url == "http://plugins.local"
        assert settings.storage.api_token == "secret"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """FLOWSCRIBE_* environment variables override the file."""
        from flowscribe.core.config import load_settings

        monkeypatch.setenv("FLOWSCRIBE_DEBUG", "true")
        path = tmp_path / "settings.yaml"
        path.write_text("bucket_or_base_path: plugins\n")

        assert load_settings(path).debug is True

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing settings file raises FileNotFoundError."""
        from flowscribe.core.config import load_settings

        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_settings(self, tmp_path: Path) -> None:
        """Invalid settings raise ValidationError."""
        from flowscribe.core.config import load_settings

        path = tmp_path / "settings.yaml"
        path.write_text("storage:\n  backend: remote\n")

        with pytest.raises(ValidationError):
            load_settings(path)


class TestLoadWorkflowFile:
    def test_reads_nodes_and_edges(self, tmp_path: Path) -> None:
        """A workflow file yields validated nodes and edges."""
        from flowscribe.core.config import load_workflow_file

        path = tmp_path / "wf.json"
        path.write_text(
            json.dumps(
                {
                    "nodes": [{"id": "S", "type": "Start"}, {"id": "E", "type": "End", "route": "/"}],
                    "edges": [{"id": "e1", "source": "S", "target": "E", "sourceHandle": "next", "targetHandle": "prev"}],
                }
            )
        )

        nodes, edges = load_workflow_file(path)

        assert [n.id for n in nodes] == ["S", "E"]
        assert edges[0].source_handle == "next"

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed JSON raises WorkflowValidationError."""
        from flowscribe.core.config import load_workflow_file

        path = tmp_path / "wf.json"
        path.write_text("{nodes: ")
        with pytest.raises(WorkflowValidationError, match="not valid JSON"):
            load_workflow_file(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """A top-level array is rejected."""
        from flowscribe.core.config import load_workflow_file

        path = tmp_path / "wf.json"
        path.write_text("[]")
        with pytest.raises(WorkflowValidationError, match="JSON object"):
            load_workflow_file(path)

    def test_invalid_node(self, tmp_path: Path) -> None:
        """A node failing validation is rejected."""
        from flowscribe.core.config import load_workflow_file

        path = tmp_path / "wf.json"
        path.write_text(json.dumps({"nodes": [{"id": ""}]}))
        with pytest.raises(WorkflowValidationError, match="Invalid workflow"):
            load_workflow_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing workflow file raises FileNotFoundError."""
        from flowscribe.core.config import load_workflow_file

        with pytest.raises(FileNotFoundError):
            load_workflow_file(tmp_path / "missing.json")
