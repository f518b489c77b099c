from enum import Enum


class ProductKind(str, Enum):
    """The two catalog entity kinds a request can turn into."""

    VEHICLE = "vehicle"
    PART = "part"

    @property
    def entity_name(self) -> str:
        return "Vehicle" if self is ProductKind.VEHICLE else "Part"

    @property
    def reference_key(self) -> str:
        """Sequence key used to allocate reference numbers for this kind."""
        return "vehicle_ref" if self is ProductKind.VEHICLE else "part_ref"
