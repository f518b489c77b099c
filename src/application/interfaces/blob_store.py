from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BlobRef:
    url: str
    public_id: str


class BlobStore(ABC):
    """Port for opaque media storage."""

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        *,
        folder: str,
        content_type: str,
        filename: str | None = None,
    ) -> BlobRef:
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        ...
