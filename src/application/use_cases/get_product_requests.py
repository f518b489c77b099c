from dataclasses import dataclass
from uuid import UUID

import structlog

from src.application.interfaces.product_request_repository import ProductRequestRepository
from src.application.interfaces.review_history_repository import (
    ReviewHistoryRecord,
    ReviewHistoryRepository,
)
from src.application.services.ttl_memo import PENDING_COUNT_KEY, TTLMemo
from src.domain.entities.identity import Identity
from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100


def _require_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise PermissionDeniedError("Administrator access required.")


@dataclass
class ProductRequestPage:
    requests: list[ProductRequest]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass
class ListProductRequestsInput:
    identity: Identity
    status: RequestStatus | None = None
    request_type: ProductKind | None = None
    page: int = 1
    limit: int = 10


class ListProductRequests:
    """Use case: Paginated admin listing, newest first."""

    def __init__(self, request_repo: ProductRequestRepository) -> None:
        self._request_repo = request_repo

    async def execute(self, input_data: ListProductRequestsInput) -> ProductRequestPage:
        _require_admin(input_data.identity)
        if input_data.page < 1 or not 1 <= input_data.limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}.")

        requests, total = await self._request_repo.list_all(
            status=input_data.status,
            request_type=input_data.request_type,
            limit=input_data.limit,
            offset=(input_data.page - 1) * input_data.limit,
        )
        return ProductRequestPage(
            requests=requests, total=total, page=input_data.page, limit=input_data.limit
        )


class ListMyProductRequests:
    """Use case: A seller's own submissions."""

    def __init__(self, request_repo: ProductRequestRepository) -> None:
        self._request_repo = request_repo

    async def execute(self, identity: Identity, *, page: int = 1, limit: int = 10) -> ProductRequestPage:
        if not identity.role.is_seller:
            raise PermissionDeniedError("Only dealers and agents have product requests.")

        requests, total = await self._request_repo.list_all(
            requester_id=identity.user_id,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ProductRequestPage(requests=requests, total=total, page=page, limit=limit)


class GetProductRequest:
    def __init__(self, request_repo: ProductRequestRepository) -> None:
        self._request_repo = request_repo

    async def execute(self, identity: Identity, request_id: UUID) -> ProductRequest:
        _require_admin(identity)
        request = await self._request_repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError("ProductRequest", request_id)
        return request


class CountPendingRequests:
    """
    Use case: Pending-request badge count for the admin dashboard.

    Served from the memo while fresh. Submissions and review actions
    invalidate it, so the count is stale by at most the memo TTL only for
    writes made by other processes.
    """

    def __init__(self, request_repo: ProductRequestRepository, stats_memo: TTLMemo) -> None:
        self._request_repo = request_repo
        self._stats_memo = stats_memo

    async def execute(self, identity: Identity) -> int:
        _require_admin(identity)
        cached = self._stats_memo.get(PENDING_COUNT_KEY)
        if cached is not None:
            return cached

        count = await self._request_repo.count_by_status(RequestStatus.PENDING)
        self._stats_memo.set(PENDING_COUNT_KEY, count)
        logger.debug("pending_count_refreshed", count=count)
        return count


@dataclass
class GetReviewHistoryOutput:
    request_id: UUID
    history: list[ReviewHistoryRecord]


class GetReviewHistory:
    """Use case: Retrieve the submission and review trail for a request."""

    def __init__(
        self,
        request_repo: ProductRequestRepository,
        history_repo: ReviewHistoryRepository,
    ) -> None:
        self._request_repo = request_repo
        self._history_repo = history_repo

    async def execute(self, identity: Identity, request_id: UUID) -> GetReviewHistoryOutput:
        _require_admin(identity)
        request = await self._request_repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError("ProductRequest", request_id)

        history = await self._history_repo.get_history_for_request(request_id)
        return GetReviewHistoryOutput(request_id=request_id, history=history)
