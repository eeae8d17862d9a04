"""Generic repository over a single Cosmos DB container."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, cast

from azure.cosmos.exceptions import CosmosResourceNotFoundError

from autosave_engine.models.base import DocumentBase

if TYPE_CHECKING:
    from azure.cosmos.aio import ContainerProxy, DatabaseProxy

T = TypeVar("T", bound=DocumentBase)


class BaseRepository(Generic[T]):
    """CRUD helpers shared by every container repository."""

    container_name: ClassVar[str]
    model_class: type[T]

    def __init__(self, database: DatabaseProxy) -> None:
        self._container: ContainerProxy = database.get_container_client(self.container_name)

    @staticmethod
    def _body(item: DocumentBase) -> dict[str, Any]:
        return item.model_dump(mode="json", exclude_none=True)

    async def create(self, item: T) -> T:
        await self._container.create_item(body=self._body(item))
        return item

    async def upsert(self, item: T) -> T:
        await self._container.upsert_item(body=self._body(item))
        return item

    async def get(self, item_id: str, partition_key: str) -> T | None:
        """Fetch a live item, returning None when missing or soft-deleted."""
        try:
            data = cast(
                "dict[str, Any]",
                await self._container.read_item(item=item_id, partition_key=partition_key),
            )
        except CosmosResourceNotFoundError:
            return None
        if data.get("deleted_at") is not None:
            return None
        return self.model_class.model_validate(data)

    async def update(self, item: T, partition_key: str) -> T:
        """Replace an item, stamping ``updated_at``."""
        item.updated_at = datetime.now(UTC)
        await self._container.replace_item(item=item.id, body=self._body(item))
        return item

    async def delete(self, item_id: str, partition_key: str) -> None:
        await self._container.delete_item(item=item_id, partition_key=partition_key)

    async def soft_delete(self, item: T, partition_key: str) -> T:
        """Mark an item deleted; `get` and the list queries stop returning it."""
        item.deleted_at = datetime.now(UTC)
        return await self.update(item, partition_key)

    async def query(
        self,
        query: str,
        parameters: list[dict[str, Any]] | None = None,
    ) -> list[T]:
        """Run a SQL query and validate every row into the model class."""
        items = self._container.query_items(query=query, parameters=parameters or [])
        return [self.model_class.model_validate(item) async for item in items]
