"""
RabbitMQ event publisher.

Uses pika in a thread-pool executor so blocking I/O doesn't stall the
asyncio event loop. A new connection is opened per publish call.
"""
import asyncio
import json
from functools import partial

import pika
import structlog

from src.application.interfaces.event_publisher import EventPublisher
from src.config import settings
from src.domain.events.domain_events import (
    CatalogEntityCreatedEvent,
    DomainEvent,
    ProductRequestReviewedEvent,
    ProductRequestSubmittedEvent,
)

logger = structlog.get_logger(__name__)

EXCHANGE_NAME = "backoffice.events"


def _event_to_routing_key(event: DomainEvent) -> str:
    if isinstance(event, ProductRequestSubmittedEvent):
        return f"product_request.submitted.{event.request_type.value}"
    if isinstance(event, ProductRequestReviewedEvent):
        return f"product_request.{event.to_status.value}"
    if isinstance(event, CatalogEntityCreatedEvent):
        return f"catalog.{event.kind.value}.created"
    return "event.unknown"


def _serialise_event(event: DomainEvent) -> str:
    payload: dict = {  # type: ignore[type-arg]
        "event_type": _event_to_routing_key(event),
        "event_id": str(event.event_id),
        "occurred_at": event.occurred_at.isoformat(),
    }

    if isinstance(event, ProductRequestSubmittedEvent):
        payload.update(
            {
                "request_id": str(event.request_id),
                "request_type": event.request_type.value,
                "requester_id": event.requester_id,
                "requester_role": event.requester_role,
            }
        )
    elif isinstance(event, ProductRequestReviewedEvent):
        payload.update(
            {
                "request_id": str(event.request_id),
                "from_status": event.from_status.value,
                "to_status": event.to_status.value,
                "reviewed_by": event.reviewed_by,
                "edited": event.edited,
            }
        )
    elif isinstance(event, CatalogEntityCreatedEvent):
        payload.update(
            {
                "entity_id": str(event.entity_id),
                "kind": event.kind.value,
                "ref_no": event.ref_no,
                "source_request_id": str(event.source_request_id) if event.source_request_id else None,
                "reference_degraded": event.reference_degraded,
            }
        )

    return json.dumps(payload, default=str)


def blocking_publish(rabbitmq_url: str, exchange: str, routing_key: str, body: str) -> None:
    connection = pika.BlockingConnection(pika.URLParameters(rabbitmq_url))
    try:
        channel = connection.channel()
        channel.exchange_declare(exchange=exchange, exchange_type="topic", durable=True)
        channel.basic_publish(
            exchange=exchange,
            routing_key=routing_key,
            body=body.encode(),
            properties=pika.BasicProperties(
                delivery_mode=pika.DeliveryMode.Persistent,
                content_type="application/json",
            ),
        )
    finally:
        connection.close()


class RabbitMQPublisher(EventPublisher):
    """Publishes domain events to a RabbitMQ topic exchange."""

    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def publish(self, event: DomainEvent) -> None:
        routing_key = _event_to_routing_key(event)
        body = _serialise_event(event)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(blocking_publish, self._url, EXCHANGE_NAME, routing_key, body),
            )
            logger.debug("event_published", routing_key=routing_key, event_id=str(event.event_id))
        except Exception as exc:
            # The action this event describes is already committed
            logger.error(
                "failed_to_publish_event",
                routing_key=routing_key,
                error=str(exc),
            )
