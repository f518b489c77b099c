import re
from datetime import datetime
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Top-level keys to snake_case; nested values are left alone."""
    return {to_snake(key): value for key, value in data.items()}


class _CamelModel(BaseModel):
    # Forms post camelCase, internal callers use snake_case
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class _ProductData(_CamelModel):
    """Known payload fields. Anything else the seller sends is kept as-is."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
        extra="allow",
        coerce_numbers_to_str=True,
    )

    title: str | None = None
    model: str | None = None
    make: str | None = None
    description: str | None = None
    price: str | None = None
    category: str | None = None
    condition: str | None = None
    year: str | None = None
    model_code: str | None = None
    images: list[str] | str | None = None
    image: str | None = None
    video: str | None = None
    ref_no: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return snake_keys(self.model_dump(exclude_none=True))


class VehicleProductData(_ProductData):
    total_price: str | None = None
    stock_no: str | None = None
    mileage: str | None = None
    engine: str | None = None
    engine_code: str | None = None
    transmission: str | None = None
    location: str | None = None
    color: str | None = None
    fuel: str | None = None
    drive: str | None = None
    seats: str | None = None
    doors: str | None = None
    features: list[str] | str | None = None
    capacity: str | None = None
    condition_comments: str | None = None
    chassis_no: str | None = None
    steering: str | None = None
    version_class: str | None = None
    registration_year_month: str | None = None
    manufacture_year_month: str | None = None
    dimension: str | None = None
    weight: str | None = None
    max_capacity: str | None = None


class PartProductData(_ProductData):
    name: str | None = None
    brand: str | None = None
    custom_maker: str | None = None
    stock: str | None = None
    compatible_vehicles: list[str] | str | None = None
    comments: str | None = None


class VehicleRequestCreate(_CamelModel):
    request_type: Literal["vehicle"]
    product_data: VehicleProductData


class PartRequestCreate(_CamelModel):
    request_type: Literal["part"]
    product_data: PartProductData


ProductRequestCreate = Annotated[
    Union[VehicleRequestCreate, PartRequestCreate],
    Field(discriminator="request_type"),
]


class ProductRequestCreatedResponse(BaseModel):
    id: UUID
    status: RequestStatus
    message: str = "Product request submitted for review."


class ProductRequestResponse(BaseModel):
    id: UUID
    request_type: ProductKind
    status: RequestStatus
    requester_id: str
    requester_name: str
    requester_role: str
    product_data: dict[str, Any]
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    admin_notes: str | None = None
    approved_product_id: UUID | None = None
    approved_product_kind: ProductKind | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, request: ProductRequest) -> "ProductRequestResponse":
        return cls(
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


class PaginatedProductRequestsResponse(BaseModel):
    requests: list[ProductRequestResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class PendingCountResponse(BaseModel):
    pending_count: int


class ReviewHistoryEntryResponse(BaseModel):
    id: UUID
    from_status: RequestStatus | None
    to_status: RequestStatus
    action: str
    reviewed_by: str
    recorded_at: datetime
    metadata: dict  # type: ignore[type-arg]


class ReviewHistoryResponse(BaseModel):
    request_id: UUID
    history: list[ReviewHistoryEntryResponse]


class ApproveRequest(_CamelModel):
    notes: str | None = None


class RejectRequest(_CamelModel):
    reason: str = ""
    notes: str | None = None


class EditAndApproveRequest(_CamelModel):
    product_data: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None

    def patch(self) -> dict[str, Any]:
        return snake_keys(self.product_data)


class ReviewResponse(BaseModel):
    request_id: UUID
    status: RequestStatus
    entity_id: UUID | None = None
    entity_kind: ProductKind | None = None
    ref_no: str | None = None
    reference_degraded: bool = False


class MediaResponse(BaseModel):
    url: str
    public_id: str


class ImageUploadResponse(BaseModel):
    images: list[MediaResponse]
