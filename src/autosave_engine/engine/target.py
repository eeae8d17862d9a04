"""The document an engine instance persists into."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DocumentTarget:
    """Identity and title of the open document.

    ``document_id`` stays None until the first successful save creates the
    document. ``title_is_user_provided`` blocks AI title generation.
    """

    owner_id: str
    document_id: str | None = None
    title: str = ""
    title_is_user_provided: bool = False
