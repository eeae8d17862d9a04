"""Save-interval calculation from the active mode and the learned editing pattern."""

from __future__ import annotations

from typing import TYPE_CHECKING

from autosave_engine.config import AutoSavePolicy
from autosave_engine.models.pattern import EditingStyle, SavePreference
from autosave_engine.models.state import SaveMode

if TYPE_CHECKING:
    from autosave_engine.models.pattern import EditingPattern


def _style_base_ms(style: EditingStyle, policy: AutoSavePolicy) -> float:
    return {
        EditingStyle.BURST: policy.burst_interval_ms,
        EditingStyle.CONTINUOUS: policy.continuous_interval_ms,
        EditingStyle.MIXED: policy.mixed_interval_ms,
    }[style]


def adaptive_interval_ms(pattern: EditingPattern | None, policy: AutoSavePolicy) -> int:
    """Derive the adaptive interval from editing style, speed and save preference.

    Without a learned pattern the adaptive default applies. The result is
    always clamped to ``[min_interval_ms, max_interval_ms]``.
    """
    if pattern is None:
        interval = float(policy.adaptive_default_interval_ms)
    else:
        interval = _style_base_ms(pattern.editing_style, policy)

        if pattern.average_editing_speed > policy.fast_speed_wpm:
            interval *= policy.fast_speed_scale
        elif pattern.average_editing_speed < policy.slow_speed_wpm:
            interval *= policy.slow_speed_scale

        if pattern.save_preference == SavePreference.FREQUENT:
            interval *= policy.frequent_scale
        elif pattern.save_preference == SavePreference.MINIMAL:
            interval *= policy.minimal_scale

    return int(round(max(policy.min_interval_ms, min(policy.max_interval_ms, interval))))


def compute_interval_ms(
    mode: SaveMode,
    pattern: EditingPattern | None,
    policy: AutoSavePolicy | None = None,
) -> int | None:
    """Map a save mode (and pattern, for adaptive mode) to an interval in milliseconds.

    Returns None for manual mode: no scheduled save ever fires.
    """
    policy = policy or AutoSavePolicy()
    if mode == SaveMode.MANUAL:
        return None
    if mode == SaveMode.REALTIME:
        return policy.realtime_interval_ms
    if mode == SaveMode.CONSERVATIVE:
        return policy.conservative_interval_ms
    return adaptive_interval_ms(pattern, policy)


def change_threshold_words(
    mode: SaveMode,
    pattern: EditingPattern | None,
    policy: AutoSavePolicy | None = None,
) -> int | None:
    """Return how many changed words trigger a save before the interval elapses.

    Returns None for manual mode. Adaptive mode uses the lower burst trigger
    once the learned style is ``burst``.
    """
    policy = policy or AutoSavePolicy()
    if mode == SaveMode.MANUAL:
        return None
    if mode == SaveMode.REALTIME:
        return policy.realtime_change_words
    if mode == SaveMode.CONSERVATIVE:
        return policy.conservative_change_words
    if pattern is not None and pattern.editing_style == EditingStyle.BURST:
        return min(policy.adaptive_change_words, policy.burst_trigger_words)
    return policy.adaptive_change_words
