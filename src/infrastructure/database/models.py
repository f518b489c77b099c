"""
SQLAlchemy ORM models.

These are purely infrastructure concerns. Domain entities are mapped to/from
these models inside the repository implementations.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus
from src.infrastructure.database.connection import Base

_request_status_enum = SAEnum(
    RequestStatus,
    name="request_status",
    values_callable=lambda obj: [e.value for e in obj],
)

_product_kind_enum = SAEnum(
    ProductKind,
    name="product_kind",
    values_callable=lambda obj: [e.value for e in obj],
)

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SequenceCounterModel(Base):
    __tablename__ = "sequence_counters"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class ProductRequestModel(Base):
    __tablename__ = "product_requests"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_type: Mapped[ProductKind] = mapped_column(_product_kind_enum, nullable=False, index=True)
    status: Mapped[RequestStatus] = mapped_column(_request_status_enum, nullable=False, index=True)

    # Requester
    requester_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    requester_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    requester_role: Mapped[str] = mapped_column(String(32), nullable=False)

    product_data: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)  # type: ignore[type-arg]

    # Review metadata
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    approved_product_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    approved_product_kind: Mapped[ProductKind | None] = mapped_column(_product_kind_enum, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    review_history: Mapped[list["ReviewHistoryModel"]] = relationship(
        "ReviewHistoryModel",
        back_populates="request",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __table_args__ = (
        Index("ix_product_requests_status_created", "status", "created_at"),
    )


class ReviewHistoryModel(Base):
    __tablename__ = "review_history"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("product_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[RequestStatus | None] = mapped_column(_request_status_enum, nullable=True)
    to_status: Mapped[RequestStatus] = mapped_column(_request_status_enum, nullable=False)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    reviewed_by: Mapped[str] = mapped_column(String(128), nullable=False)
    reviewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    metadata_: Mapped[dict] = mapped_column(  # type: ignore[type-arg]
        "metadata", JSONDocument, nullable=False, default=dict
    )

    request: Mapped[ProductRequestModel] = relationship(
        "ProductRequestModel", back_populates="review_history"
    )


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ref_no: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    reference_degraded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    price: Mapped[str] = mapped_column(String(64), nullable=False)
    total_price: Mapped[str] = mapped_column(String(64), nullable=False)
    condition: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="available")
    make: Mapped[str] = mapped_column(String(128), nullable=False, default="", index=True)
    model: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Free-form specifications, images and features
    specs: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)  # type: ignore[type-arg]
    features: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)  # type: ignore[type-arg]
    images: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)  # type: ignore[type-arg]
    image: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    video: Mapped[str] = mapped_column(String(2048), nullable=False, default="")

    # Provenance
    posted_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    posted_by_role: Mapped[str | None] = mapped_column(String(32), nullable=True)
    source_request_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PartModel(Base):
    __tablename__ = "parts"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ref_no: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    reference_degraded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    brand: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    make: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    custom_maker: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    model: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False)
    images: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)  # type: ignore[type-arg]
    video: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    model_code: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    year: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    condition: Mapped[str] = mapped_column(String(16), nullable=False)
    compatible_vehicles: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)  # type: ignore[type-arg]
    comments: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="available")

    # Provenance
    posted_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    posted_by_role: Mapped[str | None] = mapped_column(String(32), nullable=True)
    source_request_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
