import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.review_history_repository import (
    ReviewHistoryRecord,
    ReviewHistoryRepository,
)
from src.domain.enums.request_status import RequestStatus
from src.infrastructure.database.models import ReviewHistoryModel


class SqlAlchemyReviewHistoryRepository(ReviewHistoryRepository):
    """SQLAlchemy-backed implementation of ReviewHistoryRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

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
        model = ReviewHistoryModel(
            id=uuid.uuid4(),
            request_id=request_id,
            from_status=from_status,
            to_status=to_status,
            action=action,
            reviewed_by=reviewed_by,
            reviewed_at=datetime.now(timezone.utc),
            metadata_=metadata or {},
        )
        self._session.add(model)
        await self._session.flush()

        return ReviewHistoryRecord(
            id=model.id,
            request_id=request_id,
            from_status=from_status,
            to_status=to_status,
            action=action,
            reviewed_by=reviewed_by,
            recorded_at=model.reviewed_at,
            metadata=metadata or {},
        )

    async def get_history_for_request(self, request_id: UUID) -> list[ReviewHistoryRecord]:
        result = await self._session.execute(
            select(ReviewHistoryModel)
            .where(ReviewHistoryModel.request_id == request_id)
            .order_by(ReviewHistoryModel.reviewed_at.asc())
        )

        return [
            ReviewHistoryRecord(
                id=m.id,
                request_id=m.request_id,
                from_status=RequestStatus(m.from_status) if m.from_status else None,
                to_status=RequestStatus(m.to_status),
                action=m.action,
                reviewed_by=m.reviewed_by,
                recorded_at=m.reviewed_at,
                metadata=m.metadata_,
            )
            for m in result.scalars().all()
        ]
