from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ProductRequestSubmittedEvent(DomainEvent):
    """Published when a seller submits a new product request."""

    request_id: UUID = field(default_factory=uuid4)
    request_type: ProductKind = ProductKind.VEHICLE
    requester_id: str = ""
    requester_role: str = ""


@dataclass(frozen=True)
class ProductRequestReviewedEvent(DomainEvent):
    """Published whenever an administrator moves a request out of pending."""

    request_id: UUID = field(default_factory=uuid4)
    from_status: RequestStatus = RequestStatus.PENDING
    to_status: RequestStatus = RequestStatus.APPROVED
    reviewed_by: str = ""
    edited: bool = False


@dataclass(frozen=True)
class CatalogEntityCreatedEvent(DomainEvent):
    """Published when an approval produces a live catalog entity."""

    entity_id: UUID = field(default_factory=uuid4)
    kind: ProductKind = ProductKind.VEHICLE
    ref_no: str = ""
    source_request_id: UUID | None = None
    reference_degraded: bool = False
