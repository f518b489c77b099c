from abc import ABC, abstractmethod

from src.domain.entities.catalog import CatalogEntity


class CatalogRepository(ABC):
    """Port for writing live catalog entities (vehicles and parts)."""

    @abstractmethod
    async def add(self, entity: CatalogEntity) -> None:
        """Insert a new entity. Raises ValidationError if the store rejects it."""
        ...
