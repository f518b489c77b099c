"""
No-op event publisher, used in tests and when RabbitMQ is disabled.
"""
import structlog

from src.application.interfaces.event_publisher import EventPublisher
from src.domain.events.domain_events import DomainEvent

logger = structlog.get_logger(__name__)


class NoOpEventPublisher(EventPublisher):
    """Discards all events, logging each at debug level."""

    async def publish(self, event: DomainEvent) -> None:
        logger.debug(
            "noop_event_discarded",
            event_type=type(event).__name__,
            event_id=str(event.event_id),
        )
