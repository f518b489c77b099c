"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin.
"""
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.coordinators.invoice_orchestrator import InvoiceOrchestrator
from src.application.interfaces.blob_store import BlobStore
from src.application.interfaces.catalog_repository import CatalogRepository
from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.invoice_provider import InvoiceProvider
from src.application.interfaces.notifier import Notifier
from src.application.interfaces.product_request_repository import ProductRequestRepository
from src.application.interfaces.review_history_repository import ReviewHistoryRepository
from src.application.interfaces.sequence_allocator import SequenceAllocator
from src.application.services.catalog_projector import CatalogProjector
from src.application.services.reference_allocator import ReferenceNumberAllocator
from src.application.services.ttl_memo import TTLMemo, request_stats_memo
from src.application.use_cases.get_product_requests import (
    CountPendingRequests,
    GetProductRequest,
    GetReviewHistory,
    ListMyProductRequests,
    ListProductRequests,
)
from src.application.use_cases.review_product_request import (
    ApproveProductRequest,
    EditAndApproveProductRequest,
    RejectProductRequest,
)
from src.application.use_cases.submit_product_request import SubmitProductRequest
from src.application.use_cases.upload_request_media import UploadRequestMedia
from src.config import settings
from src.domain.entities.identity import Identity
from src.domain.enums.user_role import AccountStatus, UserRole
from src.domain.exceptions import PermissionDeniedError
from src.infrastructure.database.connection import engine, get_db_session
from src.infrastructure.database.repositories.catalog_repository import SqlAlchemyCatalogRepository
from src.infrastructure.database.repositories.product_request_repository import (
    SqlAlchemyProductRequestRepository,
)
from src.infrastructure.database.repositories.review_history_repository import (
    SqlAlchemyReviewHistoryRepository,
)
from src.infrastructure.database.repositories.sequence_allocator import SqlAlchemySequenceAllocator
from src.infrastructure.external_services.paypal_client import PayPalClient
from src.infrastructure.external_services.s3_blob_store import S3BlobStore
from src.infrastructure.messaging.email_notifier import LoggingNotifier, RabbitMQEmailNotifier
from src.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from src.infrastructure.messaging.rabbitmq_publisher import RabbitMQPublisher


# ---- Identity ----------------------------------------------------------------

def get_identity(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default=UserRole.USER.value),
    x_user_name: str = Header(default=""),
    x_account_status: str | None = Header(default=None),
) -> Identity:
    """Caller identity as asserted by the auth gateway in front of this service."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")
    try:
        role = UserRole(x_user_role.strip().lower())
    except ValueError:
        raise PermissionDeniedError(f"Unknown role '{x_user_role}'.") from None
    try:
        account_status = AccountStatus(x_account_status.strip().lower()) if x_account_status else None
    except ValueError:
        account_status = None
    return Identity(user_id=x_user_id, role=role, name=x_user_name, account_status=account_status)


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise PermissionDeniedError("Administrator access required.")
    return identity


# ---- Low-level dependencies ------------------------------------------------

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def get_request_repo(session: AsyncSession = Depends(get_session)) -> ProductRequestRepository:
    return SqlAlchemyProductRequestRepository(session)


def get_history_repo(session: AsyncSession = Depends(get_session)) -> ReviewHistoryRepository:
    return SqlAlchemyReviewHistoryRepository(session)


def get_catalog_repo(session: AsyncSession = Depends(get_session)) -> CatalogRepository:
    return SqlAlchemyCatalogRepository(session)


def get_sequence_allocator() -> SequenceAllocator:
    return SqlAlchemySequenceAllocator(engine)


def get_event_publisher() -> EventPublisher:
    if not settings.messaging_enabled:
        return NoOpEventPublisher()
    return RabbitMQPublisher()


def get_stats_memo() -> TTLMemo:
    return request_stats_memo


def get_projector(
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
) -> CatalogProjector:
    return CatalogProjector(ReferenceNumberAllocator(allocator))


@lru_cache
def get_invoice_provider() -> InvoiceProvider:
    # Shared so the OAuth token cache survives across requests
    return PayPalClient()


def get_notifier() -> Notifier:
    if not settings.messaging_enabled:
        return LoggingNotifier()
    return RabbitMQEmailNotifier()


@lru_cache
def get_blob_store() -> BlobStore:
    return S3BlobStore()


# ---- Use-case dependencies -------------------------------------------------

def get_submit_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    history_repo: ReviewHistoryRepository = Depends(get_history_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
    stats_memo: TTLMemo = Depends(get_stats_memo),
) -> SubmitProductRequest:
    return SubmitProductRequest(request_repo, history_repo, event_publisher, stats_memo)


def get_approve_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    history_repo: ReviewHistoryRepository = Depends(get_history_repo),
    catalog_repo: CatalogRepository = Depends(get_catalog_repo),
    projector: CatalogProjector = Depends(get_projector),
    event_publisher: EventPublisher = Depends(get_event_publisher),
    stats_memo: TTLMemo = Depends(get_stats_memo),
) -> ApproveProductRequest:
    return ApproveProductRequest(
        request_repo, history_repo, catalog_repo, projector, event_publisher, stats_memo
    )


def get_edit_and_approve_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    history_repo: ReviewHistoryRepository = Depends(get_history_repo),
    catalog_repo: CatalogRepository = Depends(get_catalog_repo),
    projector: CatalogProjector = Depends(get_projector),
    event_publisher: EventPublisher = Depends(get_event_publisher),
    stats_memo: TTLMemo = Depends(get_stats_memo),
) -> EditAndApproveProductRequest:
    return EditAndApproveProductRequest(
        request_repo, history_repo, catalog_repo, projector, event_publisher, stats_memo
    )


def get_reject_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    history_repo: ReviewHistoryRepository = Depends(get_history_repo),
    event_publisher: EventPublisher = Depends(get_event_publisher),
    stats_memo: TTLMemo = Depends(get_stats_memo),
) -> RejectProductRequest:
    return RejectProductRequest(request_repo, history_repo, event_publisher, stats_memo)


def get_list_requests_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
) -> ListProductRequests:
    return ListProductRequests(request_repo)


def get_list_my_requests_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
) -> ListMyProductRequests:
    return ListMyProductRequests(request_repo)


def get_request_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
) -> GetProductRequest:
    return GetProductRequest(request_repo)


def get_count_pending_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    stats_memo: TTLMemo = Depends(get_stats_memo),
) -> CountPendingRequests:
    return CountPendingRequests(request_repo, stats_memo)


def get_review_history_use_case(
    request_repo: ProductRequestRepository = Depends(get_request_repo),
    history_repo: ReviewHistoryRepository = Depends(get_history_repo),
) -> GetReviewHistory:
    return GetReviewHistory(request_repo, history_repo)


def get_media_use_case(blob_store: BlobStore = Depends(get_blob_store)) -> UploadRequestMedia:
    return UploadRequestMedia(blob_store)


# ---- External service coordinators ----------------------------------------

def get_invoice_orchestrator(
    provider: InvoiceProvider = Depends(get_invoice_provider),
    notifier: Notifier = Depends(get_notifier),
) -> InvoiceOrchestrator:
    return InvoiceOrchestrator(
        provider,
        notifier,
        admin_email=settings.admin_email,
        site_name=settings.site_name,
        grace_seconds=settings.invoice_accessibility_grace_seconds,
    )
