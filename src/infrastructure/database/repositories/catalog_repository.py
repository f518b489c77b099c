import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.catalog_repository import CatalogRepository
from src.domain.entities.catalog import CatalogEntity, Part, Vehicle
from src.domain.exceptions import ValidationError
from src.infrastructure.database.models import PartModel, VehicleModel

logger = structlog.get_logger(__name__)

# Vehicle attributes kept in the ``specs`` JSONB column
VEHICLE_SPEC_FIELDS = (
    "stock_no", "mileage", "year", "engine", "engine_code", "model_code",
    "transmission", "location", "color", "fuel", "drive", "seats", "doors",
    "capacity", "chassis_no", "steering", "version_class",
    "registration_year_month", "manufacture_year_month", "dimension", "weight",
    "max_capacity",
)


class CatalogWriteError(ValidationError):
    """The store rejected a catalog entity (duplicate reference number, oversized or missing value)."""


def _vehicle_to_model(vehicle: Vehicle) -> VehicleModel:
    return VehicleModel(
        id=vehicle.id,
        ref_no=vehicle.ref_no,
        reference_degraded=vehicle.reference_degraded,
        title=vehicle.title,
        price=vehicle.price,
        total_price=vehicle.total_price,
        condition=vehicle.condition,
        category=vehicle.category,
        status=vehicle.status,
        make=vehicle.make,
        model=vehicle.model,
        description=vehicle.description,
        specs={name: getattr(vehicle, name) for name in VEHICLE_SPEC_FIELDS},
        features=list(vehicle.features),
        images=list(vehicle.images),
        image=vehicle.image,
        video=vehicle.video,
        posted_by=vehicle.posted_by,
        posted_by_role=vehicle.posted_by_role,
        source_request_id=vehicle.source_request_id,
        is_approved=vehicle.is_approved,
        created_at=vehicle.created_at,
    )


def _part_to_model(part: Part) -> PartModel:
    return PartModel(
        id=part.id,
        ref_no=part.ref_no,
        reference_degraded=part.reference_degraded,
        name=part.name,
        brand=part.brand,
        make=part.make,
        custom_maker=part.custom_maker,
        model=part.model,
        category=part.category,
        price=part.price,
        stock=part.stock,
        images=list(part.images),
        video=part.video,
        description=part.description,
        model_code=part.model_code,
        year=part.year,
        condition=part.condition,
        compatible_vehicles=list(part.compatible_vehicles),
        comments=part.comments,
        status=part.status,
        posted_by=part.posted_by,
        posted_by_role=part.posted_by_role,
        source_request_id=part.source_request_id,
        created_at=part.created_at,
    )


class SqlAlchemyCatalogRepository(CatalogRepository):
    """Writes vehicles and parts into their catalog tables."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entity: CatalogEntity) -> None:
        model = _vehicle_to_model(entity) if isinstance(entity, Vehicle) else _part_to_model(entity)
        try:
            # Savepoint: a rejected insert must not poison the request's transaction
            async with self._session.begin_nested():
                self._session.add(model)
                await self._session.flush()
        except DBAPIError as exc:
            logger.warning(
                "catalog_write_rejected",
                kind=entity.kind.value,
                ref_no=entity.ref_no,
                error=str(exc.orig),
            )
            raise CatalogWriteError(
                f"Could not create {entity.kind.entity_name.lower()} {entity.ref_no}: {exc.orig}"
            ) from exc
