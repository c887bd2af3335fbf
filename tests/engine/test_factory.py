"""Tests for engine selection and scoped acquisition."""

from pathlib import Path

import pytest

from flowscribe.contracts import EngineConfigurationError, StorageBackend
from flowscribe.core.config import StorageSettings
from tests.factories import FakeEngine, make_config


class TestResolveBackend:
    def test_auto_picks_local_for_directory(self, tmp_path: Path) -> None:
        """auto resolves to local for an existing directory."""
        from flowscribe.engine import resolve_backend

        assert resolve_backend(StorageBackend.AUTO, str(tmp_path)) == StorageBackend.LOCAL

    def test_auto_picks_remote_for_bucket_name(self) -> None:
        """auto resolves to remote for anything else."""
        from flowscribe.engine import resolve_backend

        assert resolve_backend(StorageBackend.AUTO, "workflow-plugins-does-not-exist") == StorageBackend.REMOTE

    def test_explicit_backend_kept(self, tmp_path: Path) -> None:
        """An explicit backend is never overridden."""
        from flowscribe.engine import resolve_backend

        assert resolve_backend(StorageBackend.REMOTE, str(tmp_path)) == StorageBackend.REMOTE


class TestCreateEngine:
    def test_local(self, plugin_dir: Path) -> None:
        """A directory location builds a LocalPluginEngine."""
        from flowscribe.engine import LocalPluginEngine, create_engine

        engine = create_engine(make_config([], bucket_or_base_path=str(plugin_dir)))

        assert isinstance(engine, LocalPluginEngine)

    @pytest.mark.asyncio
    async def test_remote(self) -> None:
        """A bucket name with a base_url builds a RemotePluginEngine."""
        from flowscribe.engine import RemotePluginEngine, create_engine

        config = make_config(
            [],
            bucket_or_base_path="workflow-plugins-does-not-exist",
            storage_config=StorageSettings(base_url="http://plugins.test"),
        )
        engine = create_engine(config)

        assert isinstance(engine, RemotePluginEngine)
        await engine.dispose()

    def test_remote_without_url(self) -> None:
        """The remote backend without base_url is a configuration error."""
        from flowscribe.engine import create_engine

        with pytest.raises(EngineConfigurationError, match="base_url"):
            create_engine(make_config([], bucket_or_base_path="workflow-plugins-does-not-exist"))

    def test_local_without_directory(self, tmp_path: Path) -> None:
        """The local backend without a directory is a configuration error."""
        from flowscribe.engine import create_engine

        config = make_config(
            [],
            bucket_or_base_path=str(tmp_path / "missing"),
            storage_config=StorageSettings(backend=StorageBackend.LOCAL),
        )
        with pytest.raises(EngineConfigurationError):
            create_engine(config)


class TestEngineScope:
    @pytest.mark.asyncio
    async def test_injected_engine_disposed(self) -> None:
        """An injected engine is yielded and disposed."""
        from flowscribe.engine import engine_scope

        engine = FakeEngine()
        async with engine_scope(make_config([]), engine) as acquired:
            assert acquired is engine

        assert engine.dispose_count == 1

    @pytest.mark.asyncio
    async def test_disposed_on_error(self) -> None:
        """The engine is disposed when the body raises."""
        from flowscribe.engine import engine_scope

        engine = FakeEngine()
        with pytest.raises(RuntimeError):
            async with engine_scope(make_config([]), engine):
                raise RuntimeError("boom")

        assert engine.dispose_count == 1
