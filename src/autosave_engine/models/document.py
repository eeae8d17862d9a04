"""Editable document model — the live, mutable note record."""

from __future__ import annotations

from pydantic import BaseModel, Field

from autosave_engine.models.base import DocumentBase


class DocumentFields(BaseModel):
    """The mutable fields sent on every create or update."""

    title: str
    content: str
    plain_text: str = ""
    word_count: int = Field(default=0, ge=0)


class Document(DocumentBase):
    """A user's note, owned by exactly one user."""

    owner_id: str
    title: str = ""
    content: str = ""
    plain_text: str = ""
    word_count: int = 0
    tags: list[str] = Field(default_factory=list)

    def apply(self, fields: DocumentFields) -> None:
        """Copy mutable fields onto this document."""
        self.title = fields.title
        self.content = fields.content
        self.plain_text = fields.plain_text
        self.word_count = fields.word_count
