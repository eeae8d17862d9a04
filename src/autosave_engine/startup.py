"""Startup helpers — build engines backed by Cosmos DB, OpenAI and Service Bus."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from autosave_engine.database.client import CosmosClient
from autosave_engine.database.repositories import (
    DocumentRepository,
    PatternRepository,
    VersionRepository,
)
from autosave_engine.engine.facade import AutoSaveEngine
from autosave_engine.events import ServiceBusPublisher
from autosave_engine.health import check_emulators
from autosave_engine.stores.cosmos import (
    CosmosDocumentStore,
    CosmosPatternStore,
    CosmosVersionStore,
)
from autosave_engine.titles import ChatTitleGenerator, create_chat_client

if TYPE_CHECKING:
    from autosave_engine.config import Settings
    from autosave_engine.stores import TitleGenerator

logger = logging.getLogger(__name__)


async def init_database(settings: Settings) -> CosmosClient:
    """Connect to Cosmos DB; containers are created automatically in development."""
    cosmos = CosmosClient(settings.cosmos)
    await cosmos.initialize(create_containers=settings.app.is_development)
    logger.info("Cosmos DB connected — database=%s", settings.cosmos.database)
    return cosmos


def init_title_generator(settings: Settings) -> TitleGenerator | None:
    if not settings.openai.enabled:
        logger.warning(
            "AZURE_OPENAI_ENDPOINT/AZURE_OPENAI_DEPLOYMENT not set — "
            "titles fall back to the placeholder"
        )
        return None
    return ChatTitleGenerator(create_chat_client(settings.openai))


class EngineFactory:
    """Create one ``AutoSaveEngine`` per open editor, sharing the store clients."""

    def __init__(
        self,
        settings: Settings,
        cosmos: CosmosClient,
        *,
        title_generator: TitleGenerator | None = None,
        events: ServiceBusPublisher | None = None,
    ) -> None:
        self._settings = settings
        self._cosmos = cosmos
        self._title_generator = title_generator
        self._events = events
        database = cosmos.database
        self.documents = CosmosDocumentStore(DocumentRepository(database))
        self.versions = CosmosVersionStore(VersionRepository(database))
        self.patterns = CosmosPatternStore(PatternRepository(database))

    def create(self, owner_id: str, **kwargs: Any) -> AutoSaveEngine:
        """Build an engine for ``owner_id``; keyword arguments pass through."""
        return AutoSaveEngine(
            owner_id=owner_id,
            documents=self.documents,
            versions=self.versions,
            patterns=self.patterns,
            policy=self._settings.policy,
            title_generator=self._title_generator,
            events=self._events,
            **kwargs,
        )

    async def close(self) -> None:
        if self._events is not None:
            await self._events.close()
        await self._cosmos.close()


async def build_engine_factory(settings: Settings) -> EngineFactory:
    """Initialize every collaborator and return a ready ``EngineFactory``."""
    if settings.app.is_development and not await check_emulators(settings):
        raise ConnectionError("Local document store is not reachable")
    cosmos = await init_database(settings)
    return EngineFactory(
        settings,
        cosmos,
        title_generator=init_title_generator(settings),
        events=ServiceBusPublisher(settings.servicebus),
    )
