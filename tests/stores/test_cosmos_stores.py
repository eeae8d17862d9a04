"""Tests for the Cosmos-backed store adapters."""

from unittest.mock import AsyncMock

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from autosave_engine.errors import OwnershipError, TransientPersistenceError
from autosave_engine.models.document import Document, DocumentFields
from autosave_engine.models.pattern import EditingPattern
from autosave_engine.models.version import VersionSnapshot, VersionSource
from autosave_engine.stores import DocumentStore, PatternStore, VersionStore
from autosave_engine.stores.cosmos import (
    CosmosDocumentStore,
    CosmosPatternStore,
    CosmosVersionStore,
)

FIELDS = DocumentFields(title="Notes", content="<p>a b</p>", plain_text="a b", word_count=2)


def _unavailable() -> CosmosHttpResponseError:
    return CosmosHttpResponseError(status_code=503, message="service unavailable")


class TestCosmosDocumentStore:
    """Test ownership and error mapping for documents."""

    @pytest.fixture
    def repository(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def store(self, repository: AsyncMock) -> CosmosDocumentStore:
        return CosmosDocumentStore(repository)

    def test_satisfies_protocol(self, store: CosmosDocumentStore) -> None:
        """Verify the adapter matches the DocumentStore contract."""
        assert isinstance(store, DocumentStore)

    async def test_create_returns_new_id(
        self, store: CosmosDocumentStore, repository: AsyncMock
    ) -> None:
        """Verify create persists a Document owned by the caller."""
        document_id = await store.create("user-1", FIELDS)
        created = repository.create.call_args[0][0]
        assert created.id == document_id
        assert created.owner_id == "user-1"
        assert created.word_count == 2

    async def test_get_owner(self, store: CosmosDocumentStore, repository: AsyncMock) -> None:
        """Verify get_owner returns the owner or None."""
        repository.get.return_value = Document(id="doc-1", owner_id="user-1")
        assert await store.get_owner("doc-1") == "user-1"
        repository.get.return_value = None
        assert await store.get_owner("doc-1") is None

    async def test_update_applies_fields(
        self, store: CosmosDocumentStore, repository: AsyncMock
    ) -> None:
        """Verify update copies fields and replaces the item."""
        document = Document(id="doc-1", owner_id="user-1")
        repository.get.return_value = document
        await store.update("user-1", "doc-1", FIELDS)
        repository.update.assert_awaited_once_with(document, "doc-1")
        assert document.title == "Notes"
        assert document.plain_text == "a b"

    async def test_update_rejects_other_owner(
        self, store: CosmosDocumentStore, repository: AsyncMock
    ) -> None:
        """Verify a foreign document is never written."""
        repository.get.return_value = Document(id="doc-1", owner_id="user-2")
        with pytest.raises(OwnershipError):
            await store.update("user-1", "doc-1", FIELDS)
        repository.update.assert_not_awaited()

    async def test_update_rejects_missing_document(
        self, store: CosmosDocumentStore, repository: AsyncMock
    ) -> None:
        """Verify a missing document is reported as an ownership failure."""
        repository.get.return_value = None
        with pytest.raises(OwnershipError):
            await store.update("user-1", "doc-1", FIELDS)

    async def test_http_errors_become_transient(
        self, store: CosmosDocumentStore, repository: AsyncMock
    ) -> None:
        """Verify Cosmos HTTP failures are surfaced as retryable."""
        repository.create.side_effect = _unavailable()
        with pytest.raises(TransientPersistenceError):
            await store.create("user-1", FIELDS)


class TestCosmosVersionStore:
    """Test the version store adapter."""

    async def test_create_version_upserts(self) -> None:
        """Verify snapshots are upserted so retries do not duplicate."""
        repository = AsyncMock()
        store = CosmosVersionStore(repository)
        snapshot = VersionSnapshot.capture(
            document_id="doc-1",
            version=1,
            title="t",
            content="c",
            created_by="user-1",
            source=VersionSource.AUTO_SAVE,
        )
        await store.create_version(snapshot)
        repository.upsert.assert_awaited_once_with(snapshot)
        assert isinstance(store, VersionStore)

    async def test_create_version_http_error(self) -> None:
        """Verify upsert failures are retryable."""
        repository = AsyncMock()
        repository.upsert.side_effect = _unavailable()
        store = CosmosVersionStore(repository)
        snapshot = VersionSnapshot(document_id="doc-1", version=1)
        with pytest.raises(TransientPersistenceError):
            await store.create_version(snapshot)

    async def test_delegates_reads(self) -> None:
        """Verify list, get and prune delegate to the repository."""
        repository = AsyncMock()
        repository.list_by_document.return_value = []
        repository.get_by_number.return_value = None
        repository.prune.return_value = 3
        repository.next_version_number.return_value = 5
        store = CosmosVersionStore(repository)

        assert await store.list_versions("doc-1", 50) == []
        repository.list_by_document.assert_awaited_once_with("doc-1", limit=50)
        assert await store.get_version("doc-1", 2) is None
        assert await store.next_version_number("doc-1") == 5
        assert await store.prune("doc-1", max_versions=50, retention_days=90) == 3


class TestCosmosPatternStore:
    """Test the pattern store adapter."""

    async def test_load_and_save(self) -> None:
        """Verify patterns are read by key and upserted on save."""
        repository = AsyncMock()
        pattern = EditingPattern(id="doc-1")
        repository.get.return_value = pattern
        store = CosmosPatternStore(repository)

        assert await store.load("doc-1") is pattern
        repository.get.assert_awaited_once_with("doc-1", "doc-1")
        await store.save(pattern)
        repository.upsert.assert_awaited_once_with(pattern)
        assert isinstance(store, PatternStore)
