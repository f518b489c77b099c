from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Union
from uuid import UUID, uuid4

from src.domain.enums.product_kind import ProductKind
from src.domain.exceptions import ValidationError

SALVAGE_CATEGORY = "salvageVehicles"
CONDITIONS = frozenset({"new", "old"})
DEFAULT_CONDITION = "old"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_condition(value: object) -> str:
    """Map any submitted condition onto exactly one of {new, old}."""
    return value if isinstance(value, str) and value in CONDITIONS else DEFAULT_CONDITION


@dataclass
class Vehicle:
    """Live vehicle listing. Text fields are free-form as entered by the seller."""

    id: UUID = field(default_factory=uuid4)
    ref_no: str = ""
    reference_degraded: bool = False
    title: str = ""
    price: str = "0"
    total_price: str = "0"
    stock_no: str = ""
    mileage: str = ""
    year: str = ""
    engine: str = ""
    engine_code: str = ""
    model_code: str = ""
    transmission: str = ""
    location: str = ""
    color: str = ""
    fuel: str = ""
    drive: str = ""
    seats: str = ""
    doors: str = ""
    features: list[str] = field(default_factory=list)
    condition: str = DEFAULT_CONDITION
    capacity: str = ""

    # Extended specifications
    chassis_no: str = ""
    steering: str = ""
    version_class: str = ""
    registration_year_month: str = ""
    manufacture_year_month: str = ""
    dimension: str = ""
    weight: str = ""
    max_capacity: str = ""

    # Media
    images: list[str] = field(default_factory=list)
    image: str = ""
    video: str = ""

    make: str = ""
    model: str = ""
    description: str = ""
    category: str = "stockCars"
    status: str = "available"

    # Provenance
    posted_by: str | None = None
    posted_by_role: str | None = None
    source_request_id: UUID | None = None
    is_approved: bool = True

    created_at: datetime = field(default_factory=_utcnow)

    kind = ProductKind.VEHICLE

    def validate(self) -> None:
        if not self.ref_no:
            raise ValidationError("Vehicle reference number is required.")
        if not self.title:
            raise ValidationError("Vehicle title is required.")
        if self.category != SALVAGE_CATEGORY and self.condition not in CONDITIONS:
            raise ValidationError(f"Vehicle condition must be one of {sorted(CONDITIONS)}.")


@dataclass
class Part:
    """Live auto-part listing."""

    id: UUID = field(default_factory=uuid4)
    ref_no: str = ""
    reference_degraded: bool = False
    name: str = ""
    brand: str = ""
    make: str = ""  # may be "custom", see custom_maker
    custom_maker: str = ""
    model: str = ""
    category: str = "autoParts"
    price: Decimal = Decimal("0")
    stock: int = 0
    images: list[str] = field(default_factory=list)
    video: str = ""
    description: str = ""
    model_code: str = ""
    year: str = ""
    condition: str = DEFAULT_CONDITION
    compatible_vehicles: list[str] = field(default_factory=list)
    comments: str = ""
    status: str = "available"

    posted_by: str | None = None
    posted_by_role: str | None = None
    source_request_id: UUID | None = None

    created_at: datetime = field(default_factory=_utcnow)

    kind = ProductKind.PART

    @property
    def maker(self) -> str:
        """The actual maker, resolving the "custom" sentinel."""
        if self.make.lower() == "custom":
            return self.custom_maker
        return self.make

    def validate(self) -> None:
        if not self.ref_no:
            raise ValidationError("Part reference number is required.")
        if not self.name:
            raise ValidationError("Part name is required.")
        if self.price < 0:
            raise ValidationError("Part price cannot be negative.")
        if self.stock < 0:
            raise ValidationError("Part stock cannot be negative.")
        if self.condition not in CONDITIONS:
            raise ValidationError(f"Part condition must be one of {sorted(CONDITIONS)}.")


CatalogEntity = Union[Vehicle, Part]
