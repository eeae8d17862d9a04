"""Collaborator contracts consumed by the engine, and their Cosmos implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from autosave_engine.models.document import DocumentFields
    from autosave_engine.models.pattern import EditingPattern
    from autosave_engine.models.version import VersionSnapshot


@runtime_checkable
class DocumentStore(Protocol):
    """Remote store holding the live, mutable documents."""

    async def get_owner(self, document_id: str) -> str | None:
        """Return the owner of a document, or None when it does not exist."""
        ...

    async def create(self, owner_id: str, fields: DocumentFields) -> str:
        """Create a document and return its id."""
        ...

    async def update(self, owner_id: str, document_id: str, fields: DocumentFields) -> None:
        """Update a document; raise ``OwnershipError`` when missing or not owned."""
        ...


@runtime_checkable
class VersionStore(Protocol):
    """Remote store holding immutable version snapshots."""

    async def next_version_number(self, document_id: str) -> int: ...

    async def create_version(self, snapshot: VersionSnapshot) -> None: ...

    async def list_versions(self, document_id: str, limit: int) -> list[VersionSnapshot]: ...

    async def get_version(self, document_id: str, version: int) -> VersionSnapshot | None: ...

    async def prune(self, document_id: str, *, max_versions: int, retention_days: int) -> int: ...


@runtime_checkable
class PatternStore(Protocol):
    """Durable per-document record of learned editing behavior."""

    async def load(self, key: str) -> EditingPattern | None: ...

    async def save(self, pattern: EditingPattern) -> None: ...


@runtime_checkable
class TitleGenerator(Protocol):
    """Produces a short title from a note's plain text."""

    async def generate_title(self, plain_text: str) -> str: ...


__all__ = [
    "DocumentStore",
    "PatternStore",
    "TitleGenerator",
    "VersionStore",
]
