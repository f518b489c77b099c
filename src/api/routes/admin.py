from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import (
    get_approve_use_case,
    get_count_pending_use_case,
    get_edit_and_approve_use_case,
    get_list_requests_use_case,
    get_reject_use_case,
    get_request_use_case,
    get_review_history_use_case,
    require_admin,
)
from src.api.schemas.product_requests import (
    ApproveRequest,
    EditAndApproveRequest,
    PaginatedProductRequestsResponse,
    PendingCountResponse,
    ProductRequestResponse,
    RejectRequest,
    ReviewHistoryEntryResponse,
    ReviewHistoryResponse,
    ReviewResponse,
)
from src.application.use_cases.get_product_requests import (
    CountPendingRequests,
    GetProductRequest,
    GetReviewHistory,
    ListProductRequests,
    ListProductRequestsInput,
)
from src.application.use_cases.review_product_request import (
    ApproveProductRequest,
    ApproveProductRequestInput,
    EditAndApproveProductRequest,
    EditAndApproveProductRequestInput,
    RejectProductRequest,
    RejectProductRequestInput,
    ReviewProductRequestOutput,
)
from src.domain.entities.identity import Identity
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus

router = APIRouter(prefix="/admin/product-requests", tags=["admin"])


def _review_response(result: ReviewProductRequestOutput) -> ReviewResponse:
    return ReviewResponse(
        request_id=result.request_id,
        status=result.to_status,
        entity_id=result.entity_id,
        entity_kind=result.entity_kind,
        ref_no=result.ref_no,
        reference_degraded=result.reference_degraded,
    )


@router.get("", response_model=PaginatedProductRequestsResponse)
async def list_product_requests(
    status: RequestStatus | None = Query(default=None),
    request_type: ProductKind | None = Query(default=None, alias="requestType"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    identity: Identity = Depends(require_admin),
    use_case: ListProductRequests = Depends(get_list_requests_use_case),
) -> PaginatedProductRequestsResponse:
    """List product requests with optional status / type filtering, newest first."""
    result = await use_case.execute(
        ListProductRequestsInput(
            identity=identity, status=status, request_type=request_type, page=page, limit=limit
        )
    )
    return PaginatedProductRequestsResponse(
        requests=[ProductRequestResponse.from_entity(r) for r in result.requests],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/pending-count", response_model=PendingCountResponse)
async def get_pending_count(
    identity: Identity = Depends(require_admin),
    use_case: CountPendingRequests = Depends(get_count_pending_use_case),
) -> PendingCountResponse:
    return PendingCountResponse(pending_count=await use_case.execute(identity))


@router.get("/{request_id}", response_model=ProductRequestResponse)
async def get_product_request(
    request_id: UUID,
    identity: Identity = Depends(require_admin),
    use_case: GetProductRequest = Depends(get_request_use_case),
) -> ProductRequestResponse:
    return ProductRequestResponse.from_entity(await use_case.execute(identity, request_id))


@router.get("/{request_id}/history", response_model=ReviewHistoryResponse)
async def get_review_history(
    request_id: UUID,
    identity: Identity = Depends(require_admin),
    use_case: GetReviewHistory = Depends(get_review_history_use_case),
) -> ReviewHistoryResponse:
    result = await use_case.execute(identity, request_id)
    return ReviewHistoryResponse(
        request_id=result.request_id,
        history=[
            ReviewHistoryEntryResponse(
                id=entry.id,
                from_status=entry.from_status,
                to_status=entry.to_status,
                action=entry.action,
                reviewed_by=entry.reviewed_by,
                recorded_at=entry.recorded_at,
                metadata=entry.metadata,
            )
            for entry in result.history
        ],
    )


@router.post("/{request_id}/approve", response_model=ReviewResponse)
async def approve_product_request(
    request_id: UUID,
    body: ApproveRequest | None = None,
    identity: Identity = Depends(require_admin),
    use_case: ApproveProductRequest = Depends(get_approve_use_case),
) -> ReviewResponse:
    result = await use_case.execute(
        ApproveProductRequestInput(
            request_id=request_id,
            reviewer=identity,
            notes=body.notes if body else None,
        )
    )
    return _review_response(result)


@router.post("/{request_id}/reject", response_model=ReviewResponse)
async def reject_product_request(
    request_id: UUID,
    body: RejectRequest,
    identity: Identity = Depends(require_admin),
    use_case: RejectProductRequest = Depends(get_reject_use_case),
) -> ReviewResponse:
    result = await use_case.execute(
        RejectProductRequestInput(
            request_id=request_id,
            reviewer=identity,
            reason=body.reason,
            notes=body.notes,
        )
    )
    return _review_response(result)


@router.post("/{request_id}/edit-approve", response_model=ReviewResponse)
async def edit_and_approve_product_request(
    request_id: UUID,
    body: EditAndApproveRequest,
    identity: Identity = Depends(require_admin),
    use_case: EditAndApproveProductRequest = Depends(get_edit_and_approve_use_case),
) -> ReviewResponse:
    result = await use_case.execute(
        EditAndApproveProductRequestInput(
            request_id=request_id,
            reviewer=identity,
            patch=body.patch(),
            notes=body.notes,
        )
    )
    return _review_response(result)
