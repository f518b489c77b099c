from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog

from src.application.interfaces.catalog_repository import CatalogRepository
from src.application.interfaces.event_publisher import EventPublisher
from src.application.interfaces.product_request_repository import ProductRequestRepository
from src.application.interfaces.review_history_repository import ReviewHistoryRepository
from src.application.services.catalog_projector import CatalogProjector, Provenance
from src.application.services.ttl_memo import PENDING_COUNT_KEY, TTLMemo
from src.domain.entities.catalog import CatalogEntity
from src.domain.entities.identity import Identity
from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.events.domain_events import CatalogEntityCreatedEvent, DomainEvent
from src.domain.exceptions import NotFoundError, PermissionDeniedError

logger = structlog.get_logger(__name__)


@dataclass
class ApproveProductRequestInput:
    request_id: UUID
    reviewer: Identity
    notes: str | None = None


@dataclass
class RejectProductRequestInput:
    request_id: UUID
    reviewer: Identity
    reason: str
    notes: str | None = None


@dataclass
class EditAndApproveProductRequestInput:
    request_id: UUID
    reviewer: Identity
    patch: dict[str, Any] = field(default_factory=dict)
    notes: str | None = None


@dataclass
class ReviewProductRequestOutput:
    request_id: UUID
    from_status: RequestStatus
    to_status: RequestStatus
    entity_id: UUID | None = None
    entity_kind: ProductKind | None = None
    ref_no: str | None = None
    reference_degraded: bool = False


class _ReviewProductRequest:
    """Shared plumbing for the three review actions."""

    def __init__(
        self,
        request_repo: ProductRequestRepository,
        history_repo: ReviewHistoryRepository,
        event_publisher: EventPublisher,
        stats_memo: TTLMemo,
    ) -> None:
        self._request_repo = request_repo
        self._history_repo = history_repo
        self._event_publisher = event_publisher
        self._stats_memo = stats_memo

    async def _load_pending(self, request_id: UUID, reviewer: Identity) -> ProductRequest:
        if not reviewer.is_admin:
            raise PermissionDeniedError("Only administrators can review product requests.")

        request = await self._request_repo.get_by_id(request_id, for_update=True)
        if request is None:
            raise NotFoundError("ProductRequest", request_id)

        # Refuse before any side effect (reference allocation included)
        request.ensure_pending()
        return request

    async def _finish(
        self,
        request: ProductRequest,
        *,
        action: str,
        reviewer_id: str,
        metadata: dict[str, Any],
        extra_events: list[DomainEvent] | None = None,
    ) -> None:
        await self._request_repo.save(request)
        await self._history_repo.save(
            request_id=request.id,
            from_status=RequestStatus.PENDING,
            to_status=request.status,
            action=action,
            reviewed_by=reviewer_id,
            metadata=metadata,
        )
        # Events and the memo only see committed state
        await self._request_repo.commit()

        events = request.collect_events() + (extra_events or [])
        await self._event_publisher.publish_many(events)
        self._stats_memo.invalidate(PENDING_COUNT_KEY)

        logger.info(
            "product_request_reviewed",
            request_id=str(request.id),
            action=action,
            to_status=request.status.value,
            reviewed_by=reviewer_id,
        )


class _ProjectingReview(_ReviewProductRequest):
    def __init__(
        self,
        request_repo: ProductRequestRepository,
        history_repo: ReviewHistoryRepository,
        catalog_repo: CatalogRepository,
        projector: CatalogProjector,
        event_publisher: EventPublisher,
        stats_memo: TTLMemo,
    ) -> None:
        super().__init__(request_repo, history_repo, event_publisher, stats_memo)
        self._catalog_repo = catalog_repo
        self._projector = projector

    async def _publish_to_catalog(
        self, request: ProductRequest, payload: dict[str, Any]
    ) -> CatalogEntity:
        entity = await self._projector.project(
            request.request_type,
            payload,
            source=Provenance(
                request_id=request.id,
                requester_id=request.requester_id,
                requester_role=request.requester_role.value,
            ),
        )
        entity.validate()
        # A failed write propagates here and the request is never touched
        await self._catalog_repo.add(entity)
        return entity

    @staticmethod
    def _created_event(entity: CatalogEntity, request: ProductRequest) -> CatalogEntityCreatedEvent:
        return CatalogEntityCreatedEvent(
            entity_id=entity.id,
            kind=entity.kind,
            ref_no=entity.ref_no,
            source_request_id=request.id,
            reference_degraded=entity.reference_degraded,
        )


class ApproveProductRequest(_ProjectingReview):
    """
    Use case: Approve a pending request as submitted.

    Projects the stored payload into a catalog entity, writes it, then marks
    the request approved with a back-reference to the entity.
    """

    async def execute(self, input_data: ApproveProductRequestInput) -> ReviewProductRequestOutput:
        request = await self._load_pending(input_data.request_id, input_data.reviewer)
        entity = await self._publish_to_catalog(request, request.product_data)

        request.approve(
            reviewer_id=input_data.reviewer.user_id,
            entity_id=entity.id,
            notes=input_data.notes,
        )
        await self._finish(
            request,
            action="approved",
            reviewer_id=input_data.reviewer.user_id,
            metadata={"entity_id": str(entity.id), "ref_no": entity.ref_no},
            extra_events=[self._created_event(entity, request)],
        )

        return ReviewProductRequestOutput(
            request_id=request.id,
            from_status=RequestStatus.PENDING,
            to_status=request.status,
            entity_id=entity.id,
            entity_kind=entity.kind,
            ref_no=entity.ref_no,
            reference_degraded=entity.reference_degraded,
        )


class EditAndApproveProductRequest(_ProjectingReview):
    """
    Use case: Merge administrator edits into the payload and approve.

    The catalog entity is projected from the merged payload. The request's
    stored payload is replaced by the merged one and the patch itself is
    kept on the history row.
    """

    async def execute(
        self, input_data: EditAndApproveProductRequestInput
    ) -> ReviewProductRequestOutput:
        request = await self._load_pending(input_data.request_id, input_data.reviewer)
        entity = await self._publish_to_catalog(request, request.merged_payload(input_data.patch))

        request.edit_and_approve(
            reviewer_id=input_data.reviewer.user_id,
            patch=input_data.patch,
            entity_id=entity.id,
            notes=input_data.notes,
        )
        await self._finish(
            request,
            action="edited_and_approved",
            reviewer_id=input_data.reviewer.user_id,
            metadata={
                "entity_id": str(entity.id),
                "ref_no": entity.ref_no,
                "patch": input_data.patch,
            },
            extra_events=[self._created_event(entity, request)],
        )

        return ReviewProductRequestOutput(
            request_id=request.id,
            from_status=RequestStatus.PENDING,
            to_status=request.status,
            entity_id=entity.id,
            entity_kind=entity.kind,
            ref_no=entity.ref_no,
            reference_degraded=entity.reference_degraded,
        )


class RejectProductRequest(_ReviewProductRequest):
    """Use case: Reject a pending request with a mandatory reason."""

    async def execute(self, input_data: RejectProductRequestInput) -> ReviewProductRequestOutput:
        request = await self._load_pending(input_data.request_id, input_data.reviewer)

        # Raises ValidationError for a blank reason before anything changes
        request.reject(
            reviewer_id=input_data.reviewer.user_id,
            reason=input_data.reason,
            notes=input_data.notes,
        )
        await self._finish(
            request,
            action="rejected",
            reviewer_id=input_data.reviewer.user_id,
            metadata={"reason": request.rejection_reason},
        )

        return ReviewProductRequestOutput(
            request_id=request.id,
            from_status=RequestStatus.PENDING,
            to_status=request.status,
        )
