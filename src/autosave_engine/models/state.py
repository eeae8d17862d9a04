"""Save-frequency modes and scheduler states."""

from __future__ import annotations

from enum import StrEnum


class SaveMode(StrEnum):
    REALTIME = "realtime"
    CONSERVATIVE = "conservative"
    MANUAL = "manual"
    ADAPTIVE = "adaptive"


class SaveStatus(StrEnum):
    """Lifecycle of a document's pending edits."""

    CLEAN = "clean"
    DIRTY_PENDING = "dirty_pending"
    SAVING = "saving"
    SAVED = "saved"
    ERROR_BACKOFF = "error_backoff"
