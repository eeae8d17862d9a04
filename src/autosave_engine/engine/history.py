"""Version history — list, restore and prune a document's snapshots."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from autosave_engine.errors import VersioningError
from autosave_engine.models.document import DocumentFields
from autosave_engine.text import count_words, to_plain_text

if TYPE_CHECKING:
    from autosave_engine.config import AutoSavePolicy
    from autosave_engine.engine.persistence import PersistenceClient
    from autosave_engine.models.version import VersionSnapshot
    from autosave_engine.stores import VersionStore

logger = logging.getLogger(__name__)


class VersionHistory:
    """Read-side and retention operations over version snapshots."""

    def __init__(
        self,
        versions: VersionStore,
        persistence: PersistenceClient,
        policy: AutoSavePolicy,
    ) -> None:
        self._versions = versions
        self._persistence = persistence
        self._policy = policy

    async def list_versions(self, document_id: str) -> list[VersionSnapshot]:
        """Return up to ``max_versions`` snapshots, newest first; empty on failure."""
        try:
            return await self._versions.list_versions(document_id, self._policy.max_versions)
        except Exception:  # noqa: BLE001
            logger.warning("Failed to list versions — document=%s", document_id, exc_info=True)
            return []

    async def restore(self, owner_id: str, document_id: str, version: int) -> VersionSnapshot:
        """Copy a snapshot's title and content back into the live document.

        Raises ``VersioningError`` when the snapshot does not exist, and lets
        ``OwnershipError``/``PersistenceExhaustedError`` from the write through.
        """
        snapshot = await self._versions.get_version(document_id, version)
        if snapshot is None:
            raise VersioningError(f"Version {version} of document {document_id} not found")

        plain = to_plain_text(snapshot.content)
        await self._persistence.save_document(
            owner_id,
            document_id,
            DocumentFields(
                title=snapshot.title,
                content=snapshot.content,
                plain_text=plain,
                word_count=count_words(plain),
            ),
        )
        logger.info("Restored version %d — document=%s", version, document_id)
        return snapshot

    async def prune(self, document_id: str) -> int:
        """Apply count and age retention; failures are logged and return 0."""
        try:
            return await self._versions.prune(
                document_id,
                max_versions=self._policy.max_versions,
                retention_days=self._policy.retention_days,
            )
        except Exception:  # noqa: BLE001
            logger.warning("Version cleanup failed — document=%s", document_id, exc_info=True)
            return 0
