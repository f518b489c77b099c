from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from src.domain.entities.identity import Identity
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.domain.enums.user_role import UserRole
from src.domain.events.domain_events import (
    DomainEvent,
    ProductRequestReviewedEvent,
    ProductRequestSubmittedEvent,
)
from src.domain.exceptions import ConflictError, PermissionDeniedError, ValidationError
from src.domain.state_machine.review_state_machine import ReviewStateMachine

_state_machine = ReviewStateMachine()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestAlreadyReviewedError(ConflictError):
    def __init__(self, request_id: UUID, status: RequestStatus) -> None:
        self.request_id = request_id
        self.status = status
        super().__init__(f"Product request {request_id} has already been processed ({status.value}).")


@dataclass
class ProductRequest:
    """
    A seller's listing submission awaiting administrator review.

    Review metadata (reviewed_by, reviewed_at) stays unset while pending and is
    written together by whichever review action moves the request out of
    pending. Every review method refuses to touch a non-pending request.
    """

    id: UUID = field(default_factory=uuid4)
    request_type: ProductKind = ProductKind.VEHICLE
    status: RequestStatus = RequestStatus.PENDING

    # Requester
    requester_id: str = ""
    requester_name: str = ""
    requester_role: UserRole = UserRole.DEALER

    product_data: dict[str, Any] = field(default_factory=dict)

    # Review metadata
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None

    # Catalog back-reference, set on approval
    approved_product_id: UUID | None = None
    approved_product_kind: ProductKind | None = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    _events: list[DomainEvent] = field(default_factory=list, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def submit(
        cls,
        *,
        requester: Identity,
        request_type: ProductKind,
        product_data: dict[str, Any],
    ) -> "ProductRequest":
        if not requester.role.is_seller:
            raise PermissionDeniedError("Only dealers and agents can submit product requests.")
        if not (product_data.get("title") or product_data.get("model")):
            raise ValidationError("Missing product_data.title or product_data.model.")

        request = cls(
            request_type=request_type,
            requester_id=requester.user_id,
            requester_name=requester.name.strip(),
            requester_role=requester.role,
            product_data=product_data,
        )
        request._events.append(
            ProductRequestSubmittedEvent(
                request_id=request.id,
                request_type=request_type,
                requester_id=requester.user_id,
                requester_role=requester.role.value,
            )
        )
        return request

    # -------------------------------------------------------------------------
    # Review actions
    # -------------------------------------------------------------------------

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    def ensure_pending(self) -> None:
        if not self.is_pending:
            raise RequestAlreadyReviewedError(self.id, self.status)

    def merged_payload(self, patch: dict[str, Any]) -> dict[str, Any]:
        """Return the stored payload with ``patch`` laid over it. Pure."""
        merged = deepcopy(self.product_data)
        merged.update(deepcopy(patch))
        return merged

    def approve(
        self,
        *,
        reviewer_id: str,
        entity_id: UUID,
        notes: str | None = None,
    ) -> None:
        self.ensure_pending()
        self._transition(RequestStatus.APPROVED, reviewer_id=reviewer_id)
        self.admin_notes = notes
        self.approved_product_id = entity_id
        self.approved_product_kind = self.request_type

    def reject(self, *, reviewer_id: str, reason: str, notes: str | None = None) -> None:
        self.ensure_pending()
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required.")
        self._transition(RequestStatus.REJECTED, reviewer_id=reviewer_id)
        self.rejection_reason = reason.strip()
        self.admin_notes = notes

    def edit_and_approve(
        self,
        *,
        reviewer_id: str,
        patch: dict[str, Any],
        entity_id: UUID,
        notes: str | None = None,
    ) -> None:
        """Apply the admin patch and approve in one step (pending → edited → approved)."""
        self.ensure_pending()
        merged = self.merged_payload(patch)
        self._transition(RequestStatus.EDITED, reviewer_id=reviewer_id)
        self.product_data = merged
        self._transition(RequestStatus.APPROVED, reviewer_id=reviewer_id, edited=True)
        self.admin_notes = notes
        self.approved_product_id = entity_id
        self.approved_product_kind = self.request_type

    def _transition(self, new_status: RequestStatus, *, reviewer_id: str, edited: bool = False) -> None:
        _state_machine.validate_transition(self.status, new_status)

        old_status = self.status
        now = _utcnow()

        self.status = new_status
        self.reviewed_by = reviewer_id
        self.reviewed_at = now
        self.updated_at = now

        if new_status is RequestStatus.EDITED:
            return
        self._events.append(
            ProductRequestReviewedEvent(
                request_id=self.id,
                from_status=RequestStatus.PENDING if edited else old_status,
                to_status=new_status,
                reviewed_by=reviewer_id,
                edited=edited,
            )
        )

    # -------------------------------------------------------------------------
    # Event collection
    # -------------------------------------------------------------------------

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the internal buffer."""
        events = list(self._events)
        self._events.clear()
        return events
