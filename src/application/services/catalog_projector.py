"""
Maps an approved request's free-form payload onto a typed catalog entity.

The only side effect is reference-number allocation, and only when the
payload does not already carry a ``ref_no``.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog

from src.application.services.reference_allocator import ReferenceNumberAllocator
from src.domain.entities.catalog import (
    SALVAGE_CATEGORY,
    CatalogEntity,
    Part,
    Vehicle,
    coerce_condition,
)
from src.domain.enums.product_kind import ProductKind
from src.domain.services.lenient_numbers import parse_leniently
from src.domain.services.reference_numbers import ReferenceNumber
from src.domain.services.text_formatter import (
    PART_TEXT_FIELDS,
    VEHICLE_TEXT_FIELDS,
    TextFormatter,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Provenance:
    request_id: UUID
    requester_id: str
    requester_role: str


def _text(payload: dict[str, Any], *keys: str, default: str = "") -> str:
    """First non-empty value among ``keys``, as a string."""
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return str(value)
    return default


def _string_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


class CatalogProjector:
    def __init__(
        self,
        references: ReferenceNumberAllocator,
        formatter: TextFormatter | None = None,
    ) -> None:
        self._references = references
        self._formatter = formatter or TextFormatter()

    async def project(
        self,
        kind: ProductKind,
        payload: dict[str, Any],
        *,
        source: Provenance | None = None,
    ) -> CatalogEntity:
        reference = await self._reference_for(kind, payload)
        if kind is ProductKind.VEHICLE:
            entity: CatalogEntity = self._vehicle(payload, reference, source)
        else:
            entity = self._part(payload, reference, source)
        logger.info(
            "catalog_entity_projected",
            kind=kind.value,
            entity_id=str(entity.id),
            ref_no=entity.ref_no,
            reference_degraded=entity.reference_degraded,
        )
        return entity

    async def _reference_for(self, kind: ProductKind, payload: dict[str, Any]) -> ReferenceNumber:
        existing = payload.get("ref_no")
        if existing:
            return ReferenceNumber(value=str(existing), sequence=None)
        return await self._references.next_reference(kind.reference_key)

    def _vehicle(
        self, payload: dict[str, Any], reference: ReferenceNumber, source: Provenance | None
    ) -> Vehicle:
        category = _text(payload, "category", default="stockCars")
        if category == SALVAGE_CATEGORY:
            condition = _text(payload, "condition_comments")
        else:
            condition = coerce_condition(payload.get("condition"))

        images = _string_list(payload.get("images"))
        fields: dict[str, Any] = {
            "title": _text(payload, "title", "name", default="Unnamed Vehicle"),
            "price": _text(payload, "price", "total_price", default="0"),
            "total_price": _text(payload, "total_price", "price", default="0"),
            "stock_no": _text(payload, "stock_no"),
            "mileage": _text(payload, "mileage"),
            "year": _text(payload, "year"),
            "engine": _text(payload, "engine"),
            "engine_code": _text(payload, "engine_code"),
            "model_code": _text(payload, "model_code"),
            "transmission": _text(payload, "transmission"),
            "location": _text(payload, "location"),
            "color": _text(payload, "color"),
            "fuel": _text(payload, "fuel", "fuel_type"),
            "drive": _text(payload, "drive"),
            "seats": _text(payload, "seats"),
            "doors": _text(payload, "doors"),
            "features": _string_list(payload.get("features")),
            "capacity": _text(payload, "capacity"),
            "chassis_no": _text(payload, "chassis_no"),
            "steering": _text(payload, "steering"),
            "version_class": _text(payload, "version_class"),
            "registration_year_month": _text(payload, "registration_year_month"),
            "manufacture_year_month": _text(payload, "manufacture_year_month"),
            "dimension": _text(payload, "dimension"),
            "weight": _text(payload, "weight"),
            "max_capacity": _text(payload, "max_capacity"),
            "images": images,
            "image": _text(payload, "image", default=images[0] if images else ""),
            "video": _text(payload, "video"),
            "make": _text(payload, "make"),
            "model": _text(payload, "model"),
            "description": _text(payload, "description"),
        }
        fields = self._formatter.format_fields(fields, VEHICLE_TEXT_FIELDS, list_fields=("features",))

        return Vehicle(
            ref_no=reference.value,
            reference_degraded=reference.degraded,
            category=category,
            condition=condition,
            posted_by=source.requester_id if source else None,
            posted_by_role=source.requester_role if source else None,
            source_request_id=source.request_id if source else None,
            **fields,
        )

    def _part(
        self, payload: dict[str, Any], reference: ReferenceNumber, source: Provenance | None
    ) -> Part:
        price = parse_leniently(payload.get("price"))
        stock = parse_leniently(payload.get("stock"))

        fields: dict[str, Any] = {
            "name": _text(payload, "name", "model", "title", default="Unnamed Part"),
            "brand": _text(payload, "brand"),
            "make": _text(payload, "make"),
            "custom_maker": _text(payload, "custom_maker"),
            "model": _text(payload, "model"),
            "description": _text(payload, "description"),
            "model_code": _text(payload, "model_code"),
            "comments": _text(payload, "comments"),
            "compatible_vehicles": _string_list(payload.get("compatible_vehicles")),
        }
        fields = self._formatter.format_fields(
            fields, PART_TEXT_FIELDS, list_fields=("compatible_vehicles",)
        )

        return Part(
            ref_no=reference.value,
            reference_degraded=reference.degraded,
            category=_text(payload, "category", default="autoParts"),
            price=Decimal(str(price)) if price is not None else Decimal("0"),
            stock=int(stock) if stock is not None else 0,
            images=_string_list(payload.get("images")),
            video=_text(payload, "video"),
            year=_text(payload, "year"),
            condition=coerce_condition(payload.get("condition")),
            posted_by=source.requester_id if source else None,
            posted_by_role=source.requester_role if source else None,
            source_request_id=source.request_id if source else None,
            **fields,
        )
