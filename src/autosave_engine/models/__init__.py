"""Data models for stored documents and engine state."""

from autosave_engine.models.base import DocumentBase
from autosave_engine.models.document import Document, DocumentFields
from autosave_engine.models.pattern import EditingPattern, EditingStyle, SavePreference
from autosave_engine.models.state import SaveMode, SaveStatus
from autosave_engine.models.version import VersionMetadata, VersionSnapshot, VersionSource

__all__ = [
    "Document",
    "DocumentBase",
    "DocumentFields",
    "EditingPattern",
    "EditingStyle",
    "SaveMode",
    "SavePreference",
    "SaveStatus",
    "VersionMetadata",
    "VersionSnapshot",
    "VersionSource",
]
