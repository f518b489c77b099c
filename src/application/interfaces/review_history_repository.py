from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.domain.enums.request_status import RequestStatus


@dataclass
class ReviewHistoryRecord:
    id: UUID
    request_id: UUID
    from_status: RequestStatus | None
    to_status: RequestStatus
    action: str
    reviewed_by: str
    recorded_at: datetime
    metadata: dict  # type: ignore[type-arg]


class ReviewHistoryRepository(ABC):
    """Port for the append-only log of submissions and review actions."""

    @abstractmethod
    async def save(
        self,
        *,
        request_id: UUID,
        from_status: RequestStatus | None,
        to_status: RequestStatus,
        action: str,
        reviewed_by: str,
        metadata: dict | None = None,  # type: ignore[type-arg]
    ) -> ReviewHistoryRecord:
        ...

    @abstractmethod
    async def get_history_for_request(self, request_id: UUID) -> list[ReviewHistoryRecord]:
        ...
