"""Error taxonomy for persistence, versioning and title generation."""

from __future__ import annotations


class AutoSaveError(Exception):
    """Base class for all engine errors."""


class TransientPersistenceError(AutoSaveError):
    """A network or timeout failure that is safe to retry."""


class PersistenceExhaustedError(AutoSaveError):
    """Every persistence attempt failed."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException | None) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")


class OwnershipError(AutoSaveError):
    """The caller does not own the target document (or it does not exist)."""

    def __init__(self, owner_id: str, document_id: str) -> None:
        self.owner_id = owner_id
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found or not owned by {owner_id}")


class VersioningError(AutoSaveError):
    """A version snapshot could not be written, listed or restored."""


class TitleGenerationError(AutoSaveError):
    """The title generator failed or returned nothing usable."""
