"""Tests for engine factory wiring."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autosave_engine.config import AppConfig, OpenAIConfig, Settings
from autosave_engine.engine.facade import AutoSaveEngine
from autosave_engine.models.state import SaveMode
from autosave_engine.startup import EngineFactory, build_engine_factory, init_title_generator
from autosave_engine.stores.cosmos import CosmosDocumentStore
from autosave_engine.titles import ChatTitleGenerator


def _settings(env: str = "production", openai: OpenAIConfig | None = None) -> Settings:
    settings = replace(Settings(), app=AppConfig(env=env, log_level="INFO"))
    if openai is not None:
        settings = replace(settings, openai=openai)
    return settings


class TestInitTitleGenerator:
    """Test optional title generator setup."""

    def test_disabled_without_openai(self) -> None:
        """Verify no generator is built without an endpoint."""
        settings = _settings(openai=OpenAIConfig(endpoint="", deployment="", api_key=""))
        assert init_title_generator(settings) is None

    def test_builds_chat_generator(self, openai_config: OpenAIConfig) -> None:
        """Verify a chat-backed generator is built when configured."""
        with patch("autosave_engine.startup.create_chat_client") as mock_create:
            generator = init_title_generator(_settings(openai=openai_config))
        assert isinstance(generator, ChatTitleGenerator)
        mock_create.assert_called_once_with(openai_config)


class TestEngineFactory:
    """Test engine construction from shared stores."""

    def test_create_wires_shared_stores(self) -> None:
        """Verify each engine uses the factory's Cosmos stores and policy."""
        cosmos = MagicMock()
        factory = EngineFactory(_settings(), cosmos)
        engine = factory.create("user-1", document_id="doc-1", mode=SaveMode.MANUAL)

        assert isinstance(engine, AutoSaveEngine)
        assert isinstance(factory.documents, CosmosDocumentStore)
        assert engine.document_id == "doc-1"
        assert engine.target.owner_id == "user-1"
        assert engine.mode == SaveMode.MANUAL

    async def test_close_releases_clients(self) -> None:
        """Verify close shuts down events and Cosmos."""
        cosmos = MagicMock()
        cosmos.close = AsyncMock()
        events = MagicMock()
        events.close = AsyncMock()
        factory = EngineFactory(_settings(), cosmos, events=events)
        await factory.close()
        events.close.assert_awaited_once()
        cosmos.close.assert_awaited_once()


class TestInitEngineFactory:
    """Test the top-level startup path."""

    async def test_development_requires_emulator(self) -> None:
        """Verify startup stops when the local emulator is down."""
        with (
            patch("autosave_engine.startup.check_emulators", AsyncMock(return_value=False)),
            patch("autosave_engine.startup.init_database") as mock_init_db,
            pytest.raises(ConnectionError),
        ):
            await build_engine_factory(_settings(env="development"))
        mock_init_db.assert_not_called()

    async def test_production_skips_emulator_check(self) -> None:
        """Verify hosted environments connect directly."""
        cosmos = MagicMock()
        with (
            patch("autosave_engine.startup.check_emulators", AsyncMock()) as mock_check,
            patch("autosave_engine.startup.init_database", AsyncMock(return_value=cosmos)),
            patch("autosave_engine.startup.init_title_generator", return_value=None),
            patch("autosave_engine.startup.ServiceBusPublisher") as MockPublisher,
        ):
            factory = await build_engine_factory(_settings())
        mock_check.assert_not_awaited()
        assert isinstance(factory, EngineFactory)
        MockPublisher.assert_called_once()

    async def test_init_database_creates_containers_in_development(self) -> None:
        """Verify development startup provisions containers."""
        from autosave_engine.startup import init_database

        with patch("autosave_engine.startup.CosmosClient") as MockCosmos:
            MockCosmos.return_value.initialize = AsyncMock()
            await init_database(_settings(env="development"))
        MockCosmos.return_value.initialize.assert_awaited_once_with(create_containers=True)
