"""Persistence client — ownership-checked, timed-out, retried store writes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from azure.cosmos.exceptions import CosmosHttpResponseError

from autosave_engine.errors import (
    OwnershipError,
    PersistenceExhaustedError,
    TransientPersistenceError,
    VersioningError,
)
from autosave_engine.models.version import VersionSnapshot, VersionSource

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from autosave_engine.config import AutoSavePolicy
    from autosave_engine.models.document import DocumentFields
    from autosave_engine.stores import DocumentStore, VersionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth another attempt; anything else propagates on first sight.
RETRYABLE_ERRORS = (TransientPersistenceError, CosmosHttpResponseError, ConnectionError)


def compute_backoff_ms(attempt: int, policy: AutoSavePolicy) -> int:
    """Return the delay after failed ``attempt`` (1-based): ``min(base * 2^(n-1), cap)``."""
    return min(policy.backoff_base_ms * 2 ** (attempt - 1), policy.backoff_cap_ms)


class PersistenceClient:
    """Execute create-or-update and snapshot writes against the remote stores.

    Every store call races a timeout. Timeouts and transient store or network
    failures are retried with exponential backoff; ownership violations and
    any other error propagate immediately.
    """

    def __init__(
        self,
        documents: DocumentStore,
        versions: VersionStore,
        policy: AutoSavePolicy,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._documents = documents
        self._versions = versions
        self._policy = policy
        self._sleep = sleep

    async def _with_retry(self, operation: Callable[[], Awaitable[T]], name: str) -> T:
        attempts = self._policy.max_attempts
        last_error: BaseException | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(operation(), timeout=self._policy.persistence_timeout_s)
            except TimeoutError:
                last_error = TransientPersistenceError(
                    f"{name} timed out after {self._policy.persistence_timeout_s}s"
                )
            except RETRYABLE_ERRORS as exc:
                last_error = exc

            if attempt < attempts:
                delay_ms = compute_backoff_ms(attempt, self._policy)
                logger.warning(
                    "%s failed on attempt %d/%d — %s; retrying in %dms",
                    name,
                    attempt,
                    attempts,
                    last_error,
                    delay_ms,
                )
                await self._sleep(delay_ms / 1000)

        logger.error("%s failed after %d attempts — %s", name, attempts, last_error)
        raise PersistenceExhaustedError(name, attempts, last_error)

    async def verify_ownership(self, owner_id: str, document_id: str) -> None:
        owner = await self._with_retry(
            lambda: self._documents.get_owner(document_id), "ownership_check"
        )
        if owner != owner_id:
            raise OwnershipError(owner_id, document_id)

    async def save_document(
        self,
        owner_id: str,
        document_id: str | None,
        fields: DocumentFields,
    ) -> str:
        """Create the document when ``document_id`` is None, otherwise update it.

        Returns the document id. Raises ``OwnershipError`` or
        ``PersistenceExhaustedError``.
        """
        if document_id is None:
            return await self._with_retry(
                lambda: self._documents.create(owner_id, fields), "create_document"
            )

        await self.verify_ownership(owner_id, document_id)
        await self._with_retry(
            lambda: self._documents.update(owner_id, document_id, fields), "update_document"
        )
        return document_id

    async def write_version(
        self,
        owner_id: str,
        document_id: str,
        *,
        title: str,
        content: str,
        source: VersionSource,
    ) -> VersionSnapshot:
        """Write the next numbered snapshot; any failure surfaces as ``VersioningError``."""
        try:
            number = await self._with_retry(
                lambda: self._versions.next_version_number(document_id), "next_version_number"
            )
            snapshot = VersionSnapshot.capture(
                document_id=document_id,
                version=number,
                title=title,
                content=content,
                created_by=owner_id,
                source=source,
            )
            await self._with_retry(
                lambda: self._versions.create_version(snapshot), "create_version"
            )
        except Exception as exc:
            raise VersioningError(f"Version snapshot for {document_id} failed: {exc}") from exc
        return snapshot
