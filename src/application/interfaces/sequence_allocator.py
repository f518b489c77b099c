from abc import ABC, abstractmethod


class SequenceAllocator(ABC):
    """Port for atomic, per-key, strictly increasing integer allocation."""

    @abstractmethod
    async def allocate(self, key: str) -> int:
        """Return the next value for ``key``. Raises AllocationError on storage failure."""
        ...
