"""Repository for the documents container (partitioned by /id)."""

from __future__ import annotations

from autosave_engine.database.repositories.base import BaseRepository
from autosave_engine.models.document import Document


class DocumentRepository(BaseRepository[Document]):
    container_name = "documents"
    model_class = Document

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        """Fetch a user's live documents, most recently updated first."""
        return await self.query(
            "SELECT * FROM c WHERE c.owner_id = @owner_id"
            " AND NOT IS_DEFINED(c.deleted_at)"
            " ORDER BY c.updated_at DESC",
            [{"name": "@owner_id", "value": owner_id}],
        )
