"""Cosmos DB implementations of the document, version and pattern stores."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.cosmos.exceptions import CosmosHttpResponseError

from autosave_engine.errors import OwnershipError, TransientPersistenceError
from autosave_engine.models.document import Document

if TYPE_CHECKING:
    from autosave_engine.database.repositories import (
        DocumentRepository,
        PatternRepository,
        VersionRepository,
    )
    from autosave_engine.models.document import DocumentFields
    from autosave_engine.models.pattern import EditingPattern
    from autosave_engine.models.version import VersionSnapshot

logger = logging.getLogger(__name__)


def _transient(operation: str, exc: CosmosHttpResponseError) -> TransientPersistenceError:
    return TransientPersistenceError(f"{operation} failed with status {exc.status_code}: {exc.message}")


class CosmosDocumentStore:
    """Document store backed by the documents container."""

    def __init__(self, repository: DocumentRepository) -> None:
        self._repository = repository

    async def get_owner(self, document_id: str) -> str | None:
        try:
            document = await self._repository.get(document_id, document_id)
        except CosmosHttpResponseError as exc:
            raise _transient("get_owner", exc) from exc
        return document.owner_id if document else None

    async def create(self, owner_id: str, fields: DocumentFields) -> str:
        document = Document(owner_id=owner_id, **fields.model_dump())
        try:
            await self._repository.create(document)
        except CosmosHttpResponseError as exc:
            raise _transient("create", exc) from exc
        logger.debug("Document created — id=%s owner=%s", document.id, owner_id)
        return document.id

    async def update(self, owner_id: str, document_id: str, fields: DocumentFields) -> None:
        try:
            document = await self._repository.get(document_id, document_id)
            if document is None or document.owner_id != owner_id:
                raise OwnershipError(owner_id, document_id)
            document.apply(fields)
            await self._repository.update(document, document_id)
        except CosmosHttpResponseError as exc:
            raise _transient("update", exc) from exc


class CosmosVersionStore:
    """Version store backed by the versions container."""

    def __init__(self, repository: VersionRepository) -> None:
        self._repository = repository

    async def next_version_number(self, document_id: str) -> int:
        return await self._repository.next_version_number(document_id)

    async def create_version(self, snapshot: VersionSnapshot) -> None:
        # Upsert keeps a retried write of the same snapshot idempotent.
        try:
            await self._repository.upsert(snapshot)
        except CosmosHttpResponseError as exc:
            raise _transient("create_version", exc) from exc

    async def list_versions(self, document_id: str, limit: int) -> list[VersionSnapshot]:
        return await self._repository.list_by_document(document_id, limit=limit)

    async def get_version(self, document_id: str, version: int) -> VersionSnapshot | None:
        return await self._repository.get_by_number(document_id, version)

    async def prune(self, document_id: str, *, max_versions: int, retention_days: int) -> int:
        return await self._repository.prune(
            document_id, max_versions=max_versions, retention_days=retention_days
        )


class CosmosPatternStore:
    """Pattern store backed by the editing_patterns container."""

    def __init__(self, repository: PatternRepository) -> None:
        self._repository = repository

    async def load(self, key: str) -> EditingPattern | None:
        return await self._repository.get(key, key)

    async def save(self, pattern: EditingPattern) -> None:
        await self._repository.upsert(pattern)
