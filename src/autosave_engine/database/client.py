"""Async Cosmos DB client initialization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient as AzureCosmosClient
from azure.cosmos.aio import DatabaseProxy

if TYPE_CHECKING:
    from autosave_engine.config import CosmosConfig

logger = logging.getLogger(__name__)

# Container name -> partition key path
CONTAINERS: dict[str, str] = {
    "documents": "/id",
    "versions": "/document_id",
    "editing_patterns": "/id",
}


class CosmosClient:
    """Manages the async Cosmos DB client and database reference."""

    def __init__(self, config: CosmosConfig) -> None:
        self._config = config
        self._client: AzureCosmosClient | None = None
        self._database: DatabaseProxy | None = None

    async def initialize(self, *, create_containers: bool = False) -> None:
        """Create the client and obtain a database reference.

        With ``create_containers`` the database and every container the engine
        uses are created when missing (local emulator setup).
        """
        if not self._config.endpoint:
            raise ConnectionError("COSMOS_ENDPOINT is not set — cannot reach the document store")
        self._client = AzureCosmosClient(self._config.endpoint, credential=self._config.key)
        if create_containers:
            self._database = await self._client.create_database_if_not_exists(
                id=self._config.database
            )
            for name, path in CONTAINERS.items():
                await self._database.create_container_if_not_exists(
                    id=name, partition_key=PartitionKey(path=path)
                )
            logger.info(
                "Cosmos containers ready — database=%s containers=%s",
                self._config.database,
                ", ".join(CONTAINERS),
            )
        else:
            self._database = self._client.get_database_client(self._config.database)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client:
            await self._client.close()
            self._client = None
            self._database = None

    @property
    def database(self) -> DatabaseProxy:
        if self._database is None:
            raise RuntimeError("CosmosClient not initialized — call initialize() first")
        return self._database
