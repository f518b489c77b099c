from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.invoice import PurchaseIntent
from src.domain.exceptions import NotFoundError, UpstreamError


class InvoiceProviderError(UpstreamError):
    def __init__(self, message: str, detail: object | None = None) -> None:
        super().__init__("invoice_provider", message, detail)


class InvoiceConfigurationError(InvoiceProviderError):
    """Missing provider configuration (e.g. business account). Fatal, never retried."""


class InvoiceNotFoundError(NotFoundError):
    def __init__(self, invoice_id: str) -> None:
        super().__init__("Invoice", invoice_id)


@dataclass
class ProviderInvoice:
    invoice_id: str
    status: str | None = None
    invoice_number: str | None = None
    customer_invoice_url: str | None = None
    amount: dict[str, Any] | None = None
    due_date: str | None = None
    links: list[dict[str, Any]] = field(default_factory=list)


class InvoiceProvider(ABC):
    """Port for the external invoicing provider."""

    @abstractmethod
    async def create_invoice(self, intent: PurchaseIntent) -> ProviderInvoice:
        """Create a draft invoice. Raises InvoiceConfigurationError / InvoiceProviderError."""
        ...

    @abstractmethod
    async def send_invoice(self, invoice_id: str) -> None:
        ...

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> ProviderInvoice:
        """Fetch current provider state. Raises InvoiceNotFoundError for unknown ids."""
        ...
