"""Typed contract for save telemetry events."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

AUTO_SAVE_TRIGGERED = "auto-save-triggered"
AUTO_SAVE_FAILED = "auto-save-failed"
SAVE_MODE_CHANGED = "save-mode-changed"
EDITING_PATTERN_UPDATED = "editing-pattern-updated"
VERSION_CREATED = "version-created"


class EventEnvelope(BaseModel):
    """Canonical envelope for engine events sent on Service Bus."""

    event: str
    data: dict[str, Any]
    emitted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
