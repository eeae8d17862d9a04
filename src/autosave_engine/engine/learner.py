"""Editing-pattern learning from in-session telemetry."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from autosave_engine.models.pattern import EditingPattern, EditingStyle, SavePreference
from autosave_engine.text import count_words, to_plain_text

if TYPE_CHECKING:
    from collections.abc import Callable

    from autosave_engine.config import AutoSavePolicy

logger = logging.getLogger(__name__)


@dataclass
class EditingSession:
    """Telemetry for one open editor; times are clock seconds."""

    started_at: float
    last_change_at: float
    initial_word_count: int = 0
    word_count: int = 0
    keystrokes: int = 0
    pause_count: int = 0
    backspaces: int = 0
    content_length: int = 0
    typing_speed: float = 0.0


@dataclass(frozen=True)
class SessionAnalysis:
    duration_s: float
    words_added: int
    typing_speed: float
    editing_style: EditingStyle
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class PatternLearner:
    """Accumulate session telemetry and fold it into an ``EditingPattern``."""

    def __init__(self, policy: AutoSavePolicy, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._policy = policy
        self._clock = clock
        self._session: EditingSession | None = None

    @property
    def session(self) -> EditingSession | None:
        return self._session

    def start_session(self, content: str = "") -> EditingSession:
        now = self._clock()
        words = count_words(to_plain_text(content))
        self._session = EditingSession(
            started_at=now,
            last_change_at=now,
            initial_word_count=words,
            word_count=words,
            content_length=len(content),
        )
        return self._session

    def observe(self, content: str) -> None:
        """Record one content change from the editor."""
        session = self._session or self.start_session()
        now = self._clock()
        if now - session.last_change_at >= self._policy.pause_threshold_s:
            session.pause_count += 1
        session.last_change_at = now
        session.keystrokes += 1
        if len(content) < session.content_length:
            session.backspaces += 1
        session.content_length = len(content)
        session.word_count = count_words(to_plain_text(content))

    def analyze(self) -> SessionAnalysis | None:
        """Classify the current session; None when no session is running."""
        session = self._session
        if session is None:
            return None
        duration = max(0.0, self._clock() - session.started_at)
        words_added = max(0, session.word_count - session.initial_word_count)
        speed = words_added / (duration / 60) if duration > 0 else 0.0
        session.typing_speed = speed

        if session.pause_count > duration / self._policy.burst_pause_period_s:
            style = EditingStyle.BURST
        elif session.pause_count < duration / self._policy.continuous_pause_period_s:
            style = EditingStyle.CONTINUOUS
        else:
            style = EditingStyle.MIXED

        return SessionAnalysis(
            duration_s=duration,
            words_added=words_added,
            typing_speed=speed,
            editing_style=style,
        )

    def finish_session(self, existing: EditingPattern | None, key: str) -> EditingPattern | None:
        """End the session and merge it into ``existing``.

        Sessions shorter than the minimum meaningful duration leave the
        pattern untouched and return None. The learned save preference is
        always carried over.
        """
        analysis = self.analyze()
        self._session = None
        if analysis is None or analysis.duration_s < self._policy.min_session_s:
            logger.debug("Session too short to learn from — key=%s", key)
            return None

        return EditingPattern(
            id=key,
            average_editing_speed=analysis.typing_speed,
            session_length=analysis.duration_s,
            editing_style=analysis.editing_style,
            save_preference=existing.save_preference if existing else SavePreference.MODERATE,
            session_count=(existing.session_count if existing else 0) + 1,
            created_at=existing.created_at if existing else analysis.analyzed_at,
            last_updated=analysis.analyzed_at,
        )

    def learn_from_manual_save(
        self,
        existing: EditingPattern | None,
        key: str,
        gap_s: float | None,
    ) -> EditingPattern:
        """Nudge the save preference from the gap since the previous save.

        A missing pattern is created here; a missing gap (first save of the
        session) leaves the preference as it is.
        """
        pattern = existing.model_copy() if existing else EditingPattern(id=key)
        if gap_s is not None:
            if gap_s < self._policy.frequent_save_gap_s:
                pattern.save_preference = SavePreference.FREQUENT
            elif gap_s > self._policy.minimal_save_gap_s:
                pattern.save_preference = SavePreference.MINIMAL
        pattern.last_updated = datetime.now(UTC)
        return pattern
