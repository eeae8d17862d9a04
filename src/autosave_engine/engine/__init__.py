"""Adaptive auto-save and versioning engine."""

from autosave_engine.engine.facade import AutoSaveEngine
from autosave_engine.engine.history import VersionHistory
from autosave_engine.engine.intervals import (
    adaptive_interval_ms,
    change_threshold_words,
    compute_interval_ms,
)
from autosave_engine.engine.learner import EditingSession, PatternLearner, SessionAnalysis
from autosave_engine.engine.persistence import PersistenceClient, compute_backoff_ms
from autosave_engine.engine.scheduler import SaveScheduler, SaveState
from autosave_engine.engine.target import DocumentTarget
from autosave_engine.engine.versioning import VersionManager

__all__ = [
    "AutoSaveEngine",
    "DocumentTarget",
    "EditingSession",
    "PatternLearner",
    "PersistenceClient",
    "SaveScheduler",
    "SaveState",
    "SessionAnalysis",
    "VersionHistory",
    "VersionManager",
    "adaptive_interval_ms",
    "change_threshold_words",
    "compute_backoff_ms",
    "compute_interval_ms",
]
