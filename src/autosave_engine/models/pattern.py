"""Editing pattern model — learned per-document editing behavior."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from autosave_engine.models.base import DocumentBase, _utcnow


class EditingStyle(StrEnum):
    BURST = "burst"
    CONTINUOUS = "continuous"
    MIXED = "mixed"


class SavePreference(StrEnum):
    FREQUENT = "frequent"
    MODERATE = "moderate"
    MINIMAL = "minimal"


class EditingPattern(DocumentBase):
    """Learned editing behavior, keyed by document (or user) id.

    ``average_editing_speed`` is in words per minute and ``session_length``
    in seconds.
    """

    average_editing_speed: float = Field(default=0.0, ge=0)
    session_length: float = Field(default=0.0, ge=0)
    editing_style: EditingStyle = EditingStyle.MIXED
    save_preference: SavePreference = SavePreference.MODERATE
    session_count: int = Field(default=0, ge=0)
    last_updated: datetime = Field(default_factory=_utcnow)
