"""Repository for the versions container (partitioned by /document_id)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from autosave_engine.database.repositories.base import BaseRepository
from autosave_engine.models.version import VersionSnapshot

logger = logging.getLogger(__name__)


class VersionRepository(BaseRepository[VersionSnapshot]):
    """Provide data access for version snapshots."""

    container_name = "versions"
    model_class = VersionSnapshot

    async def list_by_document(
        self, document_id: str, *, limit: int | None = None
    ) -> list[VersionSnapshot]:
        """Fetch a document's snapshots, newest version first."""
        top = "TOP @limit " if limit is not None else ""
        parameters = [{"name": "@document_id", "value": document_id}]
        if limit is not None:
            parameters.append({"name": "@limit", "value": limit})
        return await self.query(
            f"SELECT {top}* FROM c WHERE c.document_id = @document_id"  # noqa: S608
            " AND NOT IS_DEFINED(c.deleted_at)"
            " ORDER BY c.version DESC",
            parameters,
        )

    async def get_latest(self, document_id: str) -> VersionSnapshot | None:
        results = await self.list_by_document(document_id, limit=1)
        return results[0] if results else None

    async def get_by_number(self, document_id: str, version: int) -> VersionSnapshot | None:
        results = await self.query(
            "SELECT * FROM c WHERE c.document_id = @document_id"
            " AND c.version = @version"
            " AND NOT IS_DEFINED(c.deleted_at)",
            [
                {"name": "@document_id", "value": document_id},
                {"name": "@version", "value": version},
            ],
        )
        return results[0] if results else None

    async def next_version_number(self, document_id: str) -> int:
        latest = await self.get_latest(document_id)
        return latest.version + 1 if latest else 1

    async def prune(self, document_id: str, *, max_versions: int, retention_days: int) -> int:
        """Delete snapshots beyond ``max_versions`` or older than the retention window."""
        snapshots = await self.list_by_document(document_id)
        cutoff = datetime.now(UTC) - timedelta(days=retention_days)
        expired = [
            snapshot
            for index, snapshot in enumerate(snapshots)
            if index >= max_versions or snapshot.created_at < cutoff
        ]
        for snapshot in expired:
            await self.delete(snapshot.id, document_id)
        if expired:
            logger.info(
                "Pruned %d version(s) — document=%s", len(expired), document_id
            )
        return len(expired)
