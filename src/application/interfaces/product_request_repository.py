from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.entities.product_request import ProductRequest
from src.domain.enums.product_kind import ProductKind
from src.domain.enums.request_status import RequestStatus


class ProductRequestRepository(ABC):
    """Port for persisting and querying ProductRequest aggregates."""

    @abstractmethod
    async def save(self, request: ProductRequest) -> None:
        ...

    @abstractmethod
    async def get_by_id(self, request_id: UUID, *, for_update: bool = False) -> ProductRequest | None:
        """Load one request. ``for_update`` locks the row until the transaction ends."""
        ...

    @abstractmethod
    async def list_all(
        self,
        *,
        status: RequestStatus | None = None,
        request_type: ProductKind | None = None,
        requester_id: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[ProductRequest], int]:
        """Return (requests, total_count), newest first."""
        ...

    @abstractmethod
    async def count_by_status(self, status: RequestStatus) -> int:
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Commit the unit of work this repository writes through, history and catalog rows included."""
        ...
