from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

# Provider statuses under which the buyer can open the invoice
ACCESSIBLE_STATUSES = frozenset({"SENT", "PAID", "PARTIALLY_PAID"})


class InvoiceState(str, Enum):
    NONE = "none"
    CREATED = "created"
    SENT = "sent"
    ACCESSIBLE = "accessible"
    INACCESSIBLE = "inaccessible"


@dataclass(frozen=True)
class PurchaseIntent:
    """A buyer's request to purchase one catalog item."""

    customer_name: str
    customer_email: str
    product_title: str
    ref_no: str
    price: Decimal
    customer_phone: str = ""
    customer_address: str = ""
    customer_city: str = ""
    customer_country: str = ""
    product_id: str | None = None
    product_category: str | None = None
    product_image: str | None = None

    @property
    def given_name(self) -> str:
        parts = self.customer_name.split()
        return parts[0] if parts else self.customer_name

    @property
    def surname(self) -> str:
        return " ".join(self.customer_name.split()[1:])


@dataclass
class InvoiceSession:
    """
    One attempt to issue and deliver an external invoice. Never persisted.

    ``is_accessible`` only flips to True after an independent status re-fetch
    confirmed the provider exposes the invoice to the buyer.
    """

    invoice_id: str = ""
    invoice_number: str | None = None
    provider_status: str | None = None
    customer_invoice_url: str | None = None
    state: InvoiceState = InvoiceState.NONE
    is_accessible: bool = False
    notified: bool = False
