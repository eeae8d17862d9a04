"""Repository for the editing_patterns container (partitioned by /id)."""

from __future__ import annotations

from autosave_engine.database.repositories.base import BaseRepository
from autosave_engine.models.pattern import EditingPattern


class PatternRepository(BaseRepository[EditingPattern]):
    container_name = "editing_patterns"
    model_class = EditingPattern
