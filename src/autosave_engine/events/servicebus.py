"""Service Bus publisher for save telemetry events."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient, ServiceBusSender
from azure.servicebus.exceptions import MessageSizeExceededError

from autosave_engine.events.contracts import EventEnvelope

if TYPE_CHECKING:
    from autosave_engine.config import ServiceBusConfig

logger = logging.getLogger(__name__)


class ServiceBusPublisher:
    """Publish engine events to an Azure Service Bus topic.

    Each message is labelled with its event type as ``subject`` and carries the
    document id as ``correlation_id``, so subscriptions can filter per event or
    per document. Events published while a send is in flight are queued and go
    out together in the next batch; one save usually emits several events at
    once.
    """

    def __init__(self, config: ServiceBusConfig) -> None:
        self._config = config
        self._client: ServiceBusClient | None = None
        self._sender: ServiceBusSender | None = None
        self._pending: list[ServiceBusMessage] = []
        self._flushing = False
        self._disabled = not config.connection_string
        if self._disabled:
            logger.warning(
                "AZURE_SERVICEBUS_CONNECTION_STRING is not set — "
                "auto-save events will not be published"
            )

    async def _ensure_sender(self) -> ServiceBusSender:
        if self._sender is None:
            self._client = ServiceBusClient.from_connection_string(
                self._config.connection_string
            )
            self._sender = self._client.get_topic_sender(topic_name=self._config.topic_name)
        return self._sender

    def _build_message(self, event_type: str, data: dict[str, Any]) -> ServiceBusMessage:
        document_id = data.get("document_id")
        properties: dict[str, str] = {"event_type": event_type}
        if document_id:
            properties["document_id"] = str(document_id)
        ttl = self._config.message_ttl_s
        return ServiceBusMessage(
            body=EventEnvelope(event=event_type, data=data).model_dump_json(),
            content_type="application/json",
            subject=event_type,
            correlation_id=str(document_id) if document_id else None,
            application_properties=properties,
            time_to_live=timedelta(seconds=ttl) if ttl > 0 else None,
        )

    async def publish(self, event_type: str, data: dict[str, Any]) -> None:
        """Queue an event and flush the queue; failures are logged and never raised."""
        if self._disabled:
            return

        try:
            self._pending.append(self._build_message(event_type, data))
        except Exception:  # noqa: BLE001
            logger.warning("Failed to build event=%s message", event_type, exc_info=True)
            return

        if self._flushing:
            # The running flush sends this message with its next batch.
            return
        self._flushing = True
        try:
            while self._pending:
                messages, self._pending = self._pending, []
                await self._send(messages)
        finally:
            self._flushing = False

    async def _send(self, messages: list[ServiceBusMessage]) -> None:
        try:
            sender = await self._ensure_sender()
            batch = await sender.create_message_batch()
            batches = 1
            for message in messages:
                try:
                    batch.add_message(message)
                except MessageSizeExceededError:
                    await sender.send_messages(batch)
                    batch = await sender.create_message_batch()
                    batches += 1
                    batch.add_message(message)
            await sender.send_messages(batch)
            logger.debug(
                "Published %d event(s) in %d batch(es) to Service Bus", len(messages), batches
            )
        except Exception:  # noqa: BLE001
            logger.warning(
                "Failed to publish %d event(s) to Service Bus",
                len(messages),
                exc_info=True,
            )

    async def close(self) -> None:
        """Close the sender and the Service Bus client."""
        if self._pending:
            logger.warning("Dropping %d unsent event(s) on close", len(self._pending))
            self._pending = []
        if self._sender:
            await self._sender.close()
            self._sender = None
        if self._client:
            await self._client.close()
            self._client = None
