"""Version snapshot model — immutable point-in-time copies of a document."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from autosave_engine.models.base import DocumentBase
from autosave_engine.text import count_words


class VersionSource(StrEnum):
    """Enumerate what caused a snapshot to be written."""

    AUTO_SAVE = "auto-save"
    MANUAL_SAVE = "manual-save"
    RESTORE = "restore"


class VersionMetadata(BaseModel):
    word_count: int = 0
    character_count: int = 0
    source: VersionSource = VersionSource.AUTO_SAVE


class VersionSnapshot(DocumentBase):
    """An immutable snapshot of document content; never updated once created."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    version: int = Field(ge=1)
    title: str = ""
    content: str = ""
    created_by: str = ""
    size: int = 0
    is_auto_save: bool = True
    metadata: VersionMetadata = Field(default_factory=VersionMetadata)

    @classmethod
    def capture(
        cls,
        *,
        document_id: str,
        version: int,
        title: str,
        content: str,
        created_by: str,
        source: VersionSource,
    ) -> VersionSnapshot:
        """Build a snapshot of ``content`` with its size and count metadata."""
        return cls(
            document_id=document_id,
            version=version,
            title=title.strip(),
            content=content,
            created_by=created_by,
            size=len(content.encode("utf-8")),
            is_auto_save=source == VersionSource.AUTO_SAVE,
            metadata=VersionMetadata(
                word_count=count_words(content),
                character_count=len(content),
                source=source,
            ),
        )
