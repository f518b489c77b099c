from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.product_request_repository import ProductRequestRepository
from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.enums.user_role import UserRole
from src.infrastructure.database.models import ProductRequestModel


def _to_domain(model: ProductRequestModel) -> ProductRequest:
    return ProductRequest(
        id=model.id,
        request_type=ProductKind(model.request_type),
        status=RequestStatus(model.status),
        requester_id=model.requester_id,
        requester_name=model.requester_name,
        requester_role=UserRole(model.requester_role),
        product_data=dict(model.product_data or {}),
        reviewed_by=model.reviewed_by,
        reviewed_at=model.reviewed_at,
        rejection_reason=model.rejection_reason,
        admin_notes=model.admin_notes,
        approved_product_id=model.approved_product_id,
        approved_product_kind=(
            ProductKind(model.approved_product_kind) if model.approved_product_kind else None
        ),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_model(request: ProductRequest) -> ProductRequestModel:
    return ProductRequestModel(
        id=request.id,
        request_type=request.request_type,
        status=request.status,
        requester_id=request.requester_id,
        requester_name=request.requester_name,
        requester_role=request.requester_role.value,
        product_data=request.product_data,
        reviewed_by=request.reviewed_by,
        reviewed_at=request.reviewed_at,
        rejection_reason=request.rejection_reason,
        admin_notes=request.admin_notes,
        approved_product_id=request.approved_product_id,
        approved_product_kind=request.approved_product_kind,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


class SqlAlchemyProductRequestRepository(ProductRequestRepository):
    """SQLAlchemy implementation for product request persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, request: ProductRequest) -> None:
        model = await self._session.get(ProductRequestModel, request.id)
        if model is None:
            self._session.add(_to_model(request))
        else:
            model.status = request.status
            # Reassign so the JSONB column is flagged dirty
            model.product_data = dict(request.product_data)
            model.reviewed_by = request.reviewed_by
            model.reviewed_at = request.reviewed_at
            model.rejection_reason = request.rejection_reason
            model.admin_notes = request.admin_notes
            model.approved_product_id = request.approved_product_id
            model.approved_product_kind = request.approved_product_kind
            model.updated_at = request.updated_at
        await self._session.flush()

    async def get_by_id(self, request_id: UUID, *, for_update: bool = False) -> ProductRequest | None:
        if for_update:
            result = await self._session.execute(
                select(ProductRequestModel)
                .where(ProductRequestModel.id == request_id)
                .with_for_update()
            )
            model = result.scalar_one_or_none()
        else:
            model = await self._session.get(ProductRequestModel, request_id)
        return _to_domain(model) if model is not None else None

    async def list_all(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: ProductKind | None = None,
        requester_id: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[ProductRequest], int]:
        query = select(ProductRequestModel)
        count_query = select(func.count()).select_from(ProductRequestModel)

        if status is not None:
            query = query.where(ProductRequestModel.status == status)
            count_query = count_query.where(ProductRequestModel.status == status)
        if request_type is not None:
            query = query.where(ProductRequestModel.request_type == request_type)
            count_query = count_query.where(ProductRequestModel.request_type == request_type)
        if requester_id is not None:
            query = query.where(ProductRequestModel.requester_id == requester_id)
            count_query = count_query.where(ProductRequestModel.requester_id == requester_id)

        query = query.order_by(ProductRequestModel.created_at.desc()).limit(limit).offset(offset)

        result = await self._session.execute(query)
        total = await self._session.scalar(count_query)

        return [_to_domain(m) for m in result.scalars().all()], total or 0

    async def count_by_status(self, status: RequestStatus) -> int:
        total = await self._session.scalar(
            select(func.count())
            .select_from(ProductRequestModel)
            .where(ProductRequestModel.status == status)
        )
        return total or 0

    async def commit(self) -> None:
        await self._session.commit()
