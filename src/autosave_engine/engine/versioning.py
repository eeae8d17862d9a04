"""Version manager — periodic, threshold-gated version snapshots."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from autosave_engine.errors import VersioningError
from autosave_engine.events import VERSION_CREATED
from autosave_engine.models.version import VersionSource

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from autosave_engine.config import AutoSavePolicy
    from autosave_engine.engine.history import VersionHistory
    from autosave_engine.engine.persistence import PersistenceClient
    from autosave_engine.engine.target import DocumentTarget
    from autosave_engine.models.version import VersionSnapshot

logger = logging.getLogger(__name__)


class VersionManager:
    """Write version snapshots on a long, change-armed timer.

    A tick only writes when the character-length delta since the last
    snapshot reaches ``min_version_delta``; forced snapshots (manual saves)
    skip that check. Snapshot failures are logged and never raised.
    """

    def __init__(
        self,
        persistence: PersistenceClient,
        target: DocumentTarget,
        policy: AutoSavePolicy,
        *,
        lock: asyncio.Lock | None = None,
        history: VersionHistory | None = None,
        publish: Callable[[str, dict[str, Any]], Awaitable[None]] | None = None,
        initial_content: str = "",
        enabled: bool = True,
    ) -> None:
        self._persistence = persistence
        self._target = target
        self._policy = policy
        self._lock = lock or asyncio.Lock()
        self._history = history
        self._publish = publish
        self._enabled = enabled
        self._latest = initial_content
        self._last_versioned = initial_content
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[VersionSnapshot | None]] = set()
        self._closed = False
        self.last_versioned_at: datetime | None = None

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    @property
    def pending_delta(self) -> int:
        return abs(len(self._latest) - len(self._last_versioned))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def on_content_changed(self, content: str) -> None:
        """Track the latest content and re-arm the version timer."""
        if self._closed:
            return
        self._latest = content
        if not self._enabled:
            return
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._policy.version_interval_s, self._on_timer)

    def reset_baseline(self, content: str) -> None:
        self._cancel_timer()
        self._latest = content
        self._last_versioned = content

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        task = asyncio.create_task(self.maybe_snapshot())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def maybe_snapshot(self) -> VersionSnapshot | None:
        """Write an auto-save snapshot when enough content changed."""
        delta = self.pending_delta
        if delta < self._policy.min_version_delta:
            logger.debug(
                "Skipping version snapshot — delta=%d below minimum %d",
                delta,
                self._policy.min_version_delta,
            )
            return None
        return await self._write(VersionSource.AUTO_SAVE)

    async def force_snapshot(self) -> VersionSnapshot | None:
        """Write a manual-save snapshot regardless of the change delta."""
        self._cancel_timer()
        return await self._write(VersionSource.MANUAL_SAVE)

    async def _write(self, source: VersionSource) -> VersionSnapshot | None:
        if not self._enabled:
            logger.debug("Skipping version snapshot — versioning disabled")
            return None
        document_id = self._target.document_id
        if document_id is None:
            logger.debug("Skipping version snapshot — document not created yet")
            return None

        async with self._lock:
            content = self._latest
            try:
                snapshot = await self._persistence.write_version(
                    self._target.owner_id,
                    document_id,
                    title=self._target.title,
                    content=content,
                    source=source,
                )
            except VersioningError:
                logger.warning(
                    "Version snapshot failed — document=%s", document_id, exc_info=True
                )
                return None

        self._last_versioned = content
        self.last_versioned_at = datetime.now(UTC)
        logger.info(
            "Version %d written — document=%s source=%s",
            snapshot.version,
            document_id,
            source,
        )
        if self._publish is not None:
            await self._publish(
                VERSION_CREATED,
                {
                    "document_id": document_id,
                    "version": snapshot.version,
                    "source": str(source),
                    "character_count": snapshot.metadata.character_count,
                },
            )
        if self._history is not None:
            await self._history.prune(document_id)
        return snapshot

    async def close(self) -> None:
        """Cancel the pending timer and wait for running snapshot writes."""
        self._closed = True
        self._cancel_timer()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
