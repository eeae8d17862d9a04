"""Adaptive auto-save and versioning for rich-text note editors."""

from autosave_engine.engine import AutoSaveEngine
from autosave_engine.models import SaveMode, SaveStatus

__all__ = ["AutoSaveEngine", "SaveMode", "SaveStatus"]
