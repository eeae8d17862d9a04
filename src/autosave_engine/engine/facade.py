"""Auto-save engine — the façade an editor screen talks to."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from autosave_engine.config import AutoSavePolicy
from autosave_engine.engine.history import VersionHistory
from autosave_engine.engine.intervals import change_threshold_words, compute_interval_ms
from autosave_engine.engine.learner import PatternLearner
from autosave_engine.engine.persistence import PersistenceClient
from autosave_engine.engine.scheduler import SaveScheduler
from autosave_engine.engine.target import DocumentTarget
from autosave_engine.engine.versioning import VersionManager
from autosave_engine.events import (
    AUTO_SAVE_FAILED,
    AUTO_SAVE_TRIGGERED,
    EDITING_PATTERN_UPDATED,
    SAVE_MODE_CHANGED,
)
from autosave_engine.models.document import DocumentFields
from autosave_engine.models.state import SaveMode, SaveStatus
from autosave_engine.text import count_words, to_plain_text

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from autosave_engine.events import EventPublisher
    from autosave_engine.models.pattern import EditingPattern
    from autosave_engine.stores import DocumentStore, PatternStore, TitleGenerator, VersionStore

logger = logging.getLogger(__name__)


class AutoSaveEngine:
    """Wire scheduling, persistence, learning and versioning for one open document.

    Call ``open()`` once the editor is shown and ``close()`` when it is torn
    down; ``close()`` cancels every timer and flushes the editing session into
    the pattern store.
    """

    def __init__(
        self,
        *,
        owner_id: str,
        documents: DocumentStore,
        versions: VersionStore,
        patterns: PatternStore,
        document_id: str | None = None,
        title: str = "",
        initial_content: str = "",
        mode: SaveMode = SaveMode.ADAPTIVE,
        policy: AutoSavePolicy | None = None,
        title_generator: TitleGenerator | None = None,
        events: EventPublisher | None = None,
        pattern_key: str | None = None,
        versioning_enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._policy = policy or AutoSavePolicy()
        self._patterns = patterns
        self._title_generator = title_generator
        self._events = events
        self._pattern_key = pattern_key or document_id or owner_id
        self._pattern: EditingPattern | None = None
        self._title_attempted = False
        self._initial_content = initial_content
        self._opened = False
        self._closed = False
        self._background: set[asyncio.Task[None]] = set()

        has_title = bool(title) and title != self._policy.placeholder_title
        self.target = DocumentTarget(
            owner_id=owner_id,
            document_id=document_id,
            title=title or self._policy.placeholder_title,
            title_is_user_provided=has_title,
        )

        # Document writes and snapshot writes for one document never overlap.
        lock = asyncio.Lock()
        self._persistence = PersistenceClient(documents, versions, self._policy, sleep=sleep)
        self.history = VersionHistory(versions, self._persistence, self._policy)
        self._learner = PatternLearner(self._policy, clock=clock)
        self._clock = clock
        self._scheduler = SaveScheduler(
            self._persist,
            self._interval_for,
            change_threshold_for=self._threshold_for,
            lock=lock,
            initial_content=initial_content,
            mode=mode,
            clock=clock,
        )
        self._versions = VersionManager(
            self._persistence,
            self.target,
            self._policy,
            lock=lock,
            history=self.history,
            publish=self._publish,
            initial_content=initial_content,
            enabled=versioning_enabled,
        )

    # -- read accessors ----------------------------------------------------

    @property
    def has_unsaved_changes(self) -> bool:
        return self._scheduler.state.has_unsaved_changes

    @property
    def last_saved_at(self) -> datetime | None:
        return self._scheduler.state.last_saved_at

    @property
    def current_interval_ms(self) -> int | None:
        return self._scheduler.state.current_interval_ms

    @property
    def mode(self) -> SaveMode:
        return self._scheduler.state.mode

    @property
    def status(self) -> SaveStatus:
        return self._scheduler.state.status

    @property
    def last_error(self) -> BaseException | None:
        return self._scheduler.state.last_error

    @property
    def document_id(self) -> str | None:
        return self.target.document_id

    @property
    def pattern(self) -> EditingPattern | None:
        return self._pattern

    @property
    def next_save_at(self) -> datetime | None:
        """Estimated time of the next scheduled save; None in manual mode or before any save."""
        state = self._scheduler.state
        if state.last_saved_at is None or state.current_interval_ms is None:
            return None
        return state.last_saved_at + timedelta(milliseconds=state.current_interval_ms)

    # -- lifecycle ---------------------------------------------------------

    async def open(self) -> None:
        """Load the learned pattern and start the editing session."""
        if self._opened:
            return
        self._opened = True
        try:
            self._pattern = await self._patterns.load(self._pattern_key)
        except Exception:  # noqa: BLE001
            logger.warning("Failed to load editing pattern — key=%s", self._pattern_key, exc_info=True)
            self._pattern = None
        self._learner.start_session(self._initial_content)
        self._scheduler.refresh_interval()
        logger.info(
            "Auto-save opened — document=%s mode=%s interval=%sms",
            self.target.document_id,
            self.mode,
            self.current_interval_ms,
        )

    async def close(self) -> None:
        """Cancel timers, wait for in-flight saves and persist the learned pattern."""
        if self._closed:
            return
        self._closed = True
        await self._scheduler.close()
        await self._versions.close()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

        pattern = self._learner.finish_session(self._pattern, self._pattern_key)
        if pattern is not None:
            await self._store_pattern(pattern)
        if self.has_unsaved_changes:
            logger.warning(
                "Auto-save closed with unsaved changes — document=%s", self.target.document_id
            )

    # -- operations --------------------------------------------------------

    def report_change(self, content: str) -> None:
        """Feed new editor content into learning, scheduling and versioning."""
        if self._closed or content == self._scheduler.latest_content:
            return
        self._learner.observe(content)
        self._scheduler.on_content_changed(content)
        self._versions.on_content_changed(content)

    async def force_save(self) -> bool:
        """Save now regardless of mode, then learn from the timing and write a version."""
        if self._closed:
            return False
        last_clock = self._scheduler.state.last_saved_clock
        gap = self._clock() - last_clock if last_clock is not None else None

        saved = await self._scheduler.trigger_save(forced=True)
        if not saved:
            return False

        pattern = self._learner.learn_from_manual_save(self._pattern, self._pattern_key, gap)
        await self._store_pattern(pattern)
        await self._versions.force_snapshot()
        return True

    def set_mode(self, mode: SaveMode) -> None:
        previous = self.mode
        self._scheduler.set_mode(mode)
        if previous != mode:
            logger.info("Save mode changed — %s -> %s", previous, mode)
            self._publish_soon(
                SAVE_MODE_CHANGED,
                {
                    "document_id": self.target.document_id,
                    "old_mode": str(previous),
                    "new_mode": str(mode),
                },
            )

    def set_title(self, title: str) -> None:
        """Record a user-provided title; it is sent with the next save."""
        self.target.title = title
        self.target.title_is_user_provided = bool(title)

    async def restore_version(self, version: int) -> bool:
        """Restore a snapshot into the live document and make it the new baseline."""
        if self.target.document_id is None:
            return False
        try:
            snapshot = await self.history.restore(
                self.target.owner_id, self.target.document_id, version
            )
        except Exception:  # noqa: BLE001
            logger.warning("Restore of version %d failed", version, exc_info=True)
            return False
        self.target.title = snapshot.title
        self._scheduler.reset_baseline(snapshot.content)
        self._versions.reset_baseline(snapshot.content)
        return True

    # -- internals ---------------------------------------------------------

    def _interval_for(self, mode: SaveMode) -> int | None:
        return compute_interval_ms(mode, self._pattern, self._policy)

    def _threshold_for(self, mode: SaveMode) -> int | None:
        return change_threshold_words(mode, self._pattern, self._policy)

    async def _resolve_title(self, plain_text: str) -> str:
        if (
            self.target.title_is_user_provided
            or self._title_attempted
            or self._title_generator is None
            or not plain_text
        ):
            return self.target.title

        self._title_attempted = True
        try:
            self.target.title = await asyncio.wait_for(
                self._title_generator.generate_title(plain_text),
                timeout=self._policy.title_timeout_s,
            )
        except TimeoutError:
            logger.warning(
                "Title generation timed out after %.1fs, keeping %r",
                self._policy.title_timeout_s,
                self.target.title,
            )
        except Exception:  # noqa: BLE001
            logger.warning("Title generation failed, keeping %r", self.target.title, exc_info=True)
        return self.target.title

    async def _persist(self, content: str, forced: bool) -> None:
        plain = to_plain_text(content)
        title = await self._resolve_title(plain)
        fields = DocumentFields(
            title=title,
            content=content,
            plain_text=plain,
            word_count=count_words(plain),
        )
        reason = "manual" if forced else "interval"
        try:
            document_id = await self._persistence.save_document(
                self.target.owner_id, self.target.document_id, fields
            )
        except Exception as exc:
            await self._publish(
                AUTO_SAVE_FAILED,
                {
                    "document_id": self.target.document_id,
                    "error": str(exc),
                    "mode": str(self.mode),
                },
            )
            raise

        if self.target.document_id is None:
            logger.info("Document created — id=%s", document_id)
        self.target.document_id = document_id
        await self._publish(
            AUTO_SAVE_TRIGGERED,
            {
                "document_id": document_id,
                "reason": reason,
                "word_count": fields.word_count,
                "mode": str(self.mode),
            },
        )

    async def _store_pattern(self, pattern: EditingPattern) -> None:
        self._pattern = pattern
        self._scheduler.refresh_interval()
        try:
            await self._patterns.save(pattern)
        except Exception:  # noqa: BLE001
            logger.warning("Failed to save editing pattern — key=%s", pattern.id, exc_info=True)
            return
        await self._publish(
            EDITING_PATTERN_UPDATED,
            {
                "key": pattern.id,
                "editing_style": str(pattern.editing_style),
                "average_speed": pattern.average_editing_speed,
                "save_preference": str(pattern.save_preference),
                "session_count": pattern.session_count,
            },
        )

    async def _publish(self, event_type: str, data: dict[str, Any]) -> None:
        if self._events is None:
            return
        try:
            await self._events.publish(event_type, data)
        except Exception:  # noqa: BLE001
            logger.debug("Event publish failed — %s", event_type, exc_info=True)

    def _publish_soon(self, event_type: str, data: dict[str, Any]) -> None:
        if self._events is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._publish(event_type, data))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
