"""Human-readable reference numbers: ``<PREFIX>-<6-digit sequence>``."""
import time
from dataclasses import dataclass

PART_REF_KEY = "part_ref"
VEHICLE_REF_KEY = "vehicle_ref"

REFERENCE_WIDTH = 6

REFERENCE_PREFIXES: dict[str, str] = {
    PART_REF_KEY: "APT",
    VEHICLE_REF_KEY: "VEH",
    # Legacy vehicle keys still present in older counters
    "veh": "VEH",
    "vhl": "VEH",
}


@dataclass(frozen=True)
class ReferenceNumber:
    value: str
    sequence: int | None
    degraded: bool = False


def prefix_for_key(key: str) -> str:
    return REFERENCE_PREFIXES.get(key, key.upper())


def format_reference_number(key: str, sequence: int) -> str:
    return f"{prefix_for_key(key)}-{str(sequence).zfill(REFERENCE_WIDTH)}"


def fallback_reference_number(key: str, now_ms: int | None = None) -> ReferenceNumber:
    """Time-derived identifier used only when the allocator is unavailable."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = str(now_ms)[-REFERENCE_WIDTH:].zfill(REFERENCE_WIDTH)
    return ReferenceNumber(value=f"{prefix_for_key(key)}-{suffix}", sequence=None, degraded=True)
