"""Save scheduler — decides when live edits are persisted.

One scheduler exists per open document. It owns at most one pending timer,
serializes persistence through a per-document lock and keeps the document
dirty until the content that is current has actually been saved.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from autosave_engine.errors import OwnershipError
from autosave_engine.models.state import SaveMode, SaveStatus
from autosave_engine.text import count_words, to_plain_text

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class SaveState:
    """Ephemeral save bookkeeping for one open document."""

    last_saved_content: str = ""
    last_saved_at: datetime | None = None
    last_saved_clock: float | None = None
    has_unsaved_changes: bool = False
    current_interval_ms: int | None = None
    mode: SaveMode = SaveMode.ADAPTIVE
    status: SaveStatus = SaveStatus.CLEAN
    last_error: BaseException | None = None


class SaveScheduler:
    """Debounce content changes and fire the persist callback at most once per interval.

    ``persist(content, forced)`` must raise on failure. ``interval_for(mode)``
    returns the delay in milliseconds, or None when nothing may be scheduled.
    ``change_threshold_for(mode)`` returns how many changed words start a save
    right away instead of waiting for the timer; None disables that trigger.
    """

    def __init__(
        self,
        persist: Callable[[str, bool], Awaitable[None]],
        interval_for: Callable[[SaveMode], int | None],
        *,
        change_threshold_for: Callable[[SaveMode], int | None] | None = None,
        lock: asyncio.Lock | None = None,
        initial_content: str = "",
        mode: SaveMode = SaveMode.ADAPTIVE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._persist = persist
        self._interval_for = interval_for
        self._change_threshold_for = change_threshold_for
        self._lock = lock or asyncio.Lock()
        self._clock = clock
        self._latest = initial_content
        self._saved_words = _words(initial_content)
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[bool]] = set()
        self._closed = False
        self.state = SaveState(
            last_saved_content=initial_content,
            mode=mode,
            current_interval_ms=interval_for(mode),
        )

    # -- accessors ---------------------------------------------------------

    @property
    def latest_content(self) -> str:
        return self._latest

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    @property
    def closed(self) -> bool:
        return self._closed

    # -- timer management --------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm(self) -> None:
        """Cancel any pending timer, then schedule one for the current interval."""
        self._cancel_timer()
        interval = self.state.current_interval_ms
        if self._closed or interval is None or self.state.mode == SaveMode.MANUAL:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(interval / 1000, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._spawn_save()

    def _spawn_save(self) -> None:
        task = asyncio.create_task(self.trigger_save(forced=False))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -- operations ---------------------------------------------------------

    def on_content_changed(self, content: str) -> None:
        """Record new editor content and (re)arm the save timer when dirty."""
        if self._closed:
            return
        self._latest = content
        if content == self.state.last_saved_content:
            if self.state.status != SaveStatus.SAVING:
                self._cancel_timer()
                self.state.has_unsaved_changes = False
                self.state.status = SaveStatus.CLEAN
            return

        self.state.has_unsaved_changes = True
        if self.state.status != SaveStatus.SAVING:
            self.state.status = SaveStatus.DIRTY_PENDING
        self.state.current_interval_ms = self._interval_for(self.state.mode)
        if self._threshold_reached(content):
            self._cancel_timer()
            self._spawn_save()
            return
        self._arm()

    def _threshold_reached(self, content: str) -> bool:
        if self._change_threshold_for is None or self.state.status == SaveStatus.SAVING:
            return False
        if self._tasks:
            # A save is already queued; it picks up the latest content.
            return False
        threshold = self._change_threshold_for(self.state.mode)
        if threshold is None:
            return False
        return abs(_words(content) - self._saved_words) >= threshold

    def set_mode(self, mode: SaveMode) -> None:
        """Switch save-frequency mode; manual cancels the timer but keeps the dirty flag."""
        self.state.mode = mode
        self.state.current_interval_ms = self._interval_for(mode)
        if mode == SaveMode.MANUAL:
            self._cancel_timer()
        elif self.state.has_unsaved_changes:
            self._arm()

    def refresh_interval(self) -> None:
        """Recompute the interval after the learned pattern changed."""
        self.state.current_interval_ms = self._interval_for(self.state.mode)

    def reset_baseline(self, content: str) -> None:
        """Treat ``content`` as persisted, e.g. after a version restore."""
        self._cancel_timer()
        self._latest = content
        self.state.last_saved_content = content
        self.state.last_saved_at = datetime.now(UTC)
        self.state.last_saved_clock = self._clock()
        self.state.has_unsaved_changes = False
        self.state.status = SaveStatus.CLEAN
        self._saved_words = _words(content)

    async def trigger_save(self, *, forced: bool = False) -> bool:
        """Persist the latest content. Returns True when a save succeeded.

        Non-forced calls come from the timer and are ignored in manual mode or
        when the document is no longer dirty. Forced calls bypass both gates
        and cancel any pending timer.
        """
        if forced:
            self._cancel_timer()
        elif self.state.mode == SaveMode.MANUAL or not self.state.has_unsaved_changes:
            return False

        async with self._lock:
            if not forced and (self._closed or not self.state.has_unsaved_changes):
                return False
            return await self._save_locked(forced)

    async def _save_locked(self, forced: bool) -> bool:
        content = self._latest
        self.state.status = SaveStatus.SAVING
        try:
            await self._persist(content, forced)
        except OwnershipError as exc:
            logger.error("Save rejected — %s", exc)  # noqa: TRY400
            self.state.last_error = exc
            self.state.status = SaveStatus.ERROR_BACKOFF
            self.state.has_unsaved_changes = True
            return False
        except Exception as exc:  # noqa: BLE001
            logger.warning("Save failed, document stays dirty — %s", exc, exc_info=True)
            self.state.last_error = exc
            self.state.status = SaveStatus.ERROR_BACKOFF
            self.state.has_unsaved_changes = True
            if self._timer is None:
                self._arm()
            return False

        self.state.last_error = None
        self.state.last_saved_content = content
        self.state.last_saved_at = datetime.now(UTC)
        self.state.last_saved_clock = self._clock()
        self.state.status = SaveStatus.SAVED
        self._saved_words = _words(content)

        if self._latest != content:
            # Edits arrived while the save was in flight.
            self.state.has_unsaved_changes = True
            self.state.status = SaveStatus.DIRTY_PENDING
            if self._timer is None:
                self._arm()
        else:
            self.state.has_unsaved_changes = False
            # Saved is observable for one loop turn, then settles to Clean.
            asyncio.get_running_loop().call_soon(self._settle_saved)
        logger.debug("Saved %d chars — forced=%s", len(content), forced)
        return True

    def _settle_saved(self) -> None:
        if self.state.status == SaveStatus.SAVED:
            self.state.status = SaveStatus.CLEAN

    async def close(self) -> None:
        """Cancel the pending timer and wait for timer-started saves to finish."""
        self._closed = True
        self._cancel_timer()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


def _words(content: str) -> int:
    return count_words(to_plain_text(content))
