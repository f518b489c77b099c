from abc import ABC, abstractmethod

from src.domain.events.domain_events import DomainEvent


class EventPublisher(ABC):
    """Port for publishing request / catalog events to the message bus.

    Implementations must never raise: a lost event is logged, the review
    action it describes has already committed.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        ...

    async def publish_many(self, events: list[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)
