import structlog

from src.application.interfaces.sequence_allocator import SequenceAllocator
from src.domain.exceptions import AllocationError
from src.domain.services.reference_numbers import (
    ReferenceNumber,
    fallback_reference_number,
    format_reference_number,
)

logger = structlog.get_logger(__name__)


class ReferenceNumberAllocator:
    """Turns sequence values into reference numbers, degrading instead of failing."""

    def __init__(self, allocator: SequenceAllocator) -> None:
        self._allocator = allocator

    async def next_reference(self, key: str) -> ReferenceNumber:
        try:
            sequence = await self._allocator.allocate(key)
        except AllocationError as exc:
            reference = fallback_reference_number(key)
            logger.warning(
                "reference_allocation_degraded",
                key=key,
                fallback=reference.value,
                error=str(exc),
            )
            return reference

        value = format_reference_number(key, sequence)
        logger.info("reference_allocated", key=key, sequence=sequence, ref_no=value)
        return ReferenceNumber(value=value, sequence=sequence)
