"""Repository modules for each Cosmos DB container."""

from autosave_engine.database.repositories.documents import DocumentRepository
from autosave_engine.database.repositories.patterns import PatternRepository
from autosave_engine.database.repositories.versions import VersionRepository

__all__ = [
    "DocumentRepository",
    "PatternRepository",
    "VersionRepository",
]
