"""Save telemetry events and the publishing interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from autosave_engine.events.contracts import (
    AUTO_SAVE_FAILED,
    AUTO_SAVE_TRIGGERED,
    EDITING_PATTERN_UPDATED,
    SAVE_MODE_CHANGED,
    VERSION_CREATED,
    EventEnvelope,
)
from autosave_engine.events.servicebus import ServiceBusPublisher


@runtime_checkable
class EventPublisher(Protocol):
    """Protocol for publishing engine events to interested consumers."""

    async def publish(self, event_type: str, data: dict[str, Any]) -> None:
        """Broadcast an event; implementations must not raise."""
        ...


__all__ = [
    "AUTO_SAVE_FAILED",
    "AUTO_SAVE_TRIGGERED",
    "EDITING_PATTERN_UPDATED",
    "SAVE_MODE_CHANGED",
    "VERSION_CREATED",
    "EventEnvelope",
    "EventPublisher",
    "ServiceBusPublisher",
]
