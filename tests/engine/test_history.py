"""Tests for version listing, restore and retention."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

from autosave_engine.engine.history import VersionHistory
from autosave_engine.errors import VersioningError
from autosave_engine.models.version import VersionSnapshot, VersionSource

if TYPE_CHECKING:
    from autosave_engine.config import AutoSavePolicy


def _snapshot(version: int = 3) -> VersionSnapshot:
    return VersionSnapshot.capture(
        document_id="doc-1",
        version=version,
        title="Draft",
        content="<p>old text here</p>",
        created_by="user-1",
        source=VersionSource.AUTO_SAVE,
    )


@pytest.fixture
def persistence() -> MagicMock:
    client = MagicMock()
    client.save_document = AsyncMock(return_value="doc-1")
    return client


class TestListVersions:
    """Test the List Versions."""

    async def test_passes_retention_limit(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify passes retention limit."""
        versions.list_versions.return_value = [_snapshot(2), _snapshot(1)]
        history = VersionHistory(versions, persistence, policy)
        result = await history.list_versions("doc-1")
        assert [s.version for s in result] == [2, 1]
        versions.list_versions.assert_awaited_once_with("doc-1", 50)

    async def test_failure_returns_empty(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify failure returns empty."""
        versions.list_versions.side_effect = RuntimeError("down")
        history = VersionHistory(versions, persistence, policy)
        assert await history.list_versions("doc-1") == []


class TestRestore:
    """Test the Restore."""

    async def test_copies_snapshot_into_document(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify copies snapshot into document."""
        versions.get_version.return_value = _snapshot()
        history = VersionHistory(versions, persistence, policy)
        snapshot = await history.restore("user-1", "doc-1", 3)
        assert snapshot.version == 3
        owner_id, document_id, fields = persistence.save_document.await_args.args
        assert (owner_id, document_id) == ("user-1", "doc-1")
        assert fields.title == "Draft"
        assert fields.plain_text == "old text here"
        assert fields.word_count == 3

    async def test_missing_version_raises(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify missing version raises."""
        versions.get_version.return_value = None
        history = VersionHistory(versions, persistence, policy)
        with pytest.raises(VersioningError):
            await history.restore("user-1", "doc-1", 7)
        persistence.save_document.assert_not_awaited()


class TestPrune:
    """Test the Prune."""

    async def test_applies_policy(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify applies policy."""
        versions.prune.return_value = 4
        history = VersionHistory(versions, persistence, policy)
        assert await history.prune("doc-1") == 4
        versions.prune.assert_awaited_once_with("doc-1", max_versions=50, retention_days=90)

    async def test_failure_returns_zero(
        self, policy: AutoSavePolicy, versions: AsyncMock, persistence: MagicMock
    ) -> None:
        """Verify failure returns zero."""
        versions.prune.side_effect = RuntimeError("down")
        history = VersionHistory(versions, persistence, policy)
        assert await history.prune("doc-1") == 0
