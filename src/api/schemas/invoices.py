from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.domain.entities.invoice import InvoiceState, PurchaseIntent
from src.domain.services.lenient_numbers import parse_leniently


class InvoiceCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    customer_name: str = Field(min_length=1)
    customer_email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    customer_phone: str = ""
    customer_address: str = ""
    customer_city: str = ""
    customer_country: str = ""
    product_title: str = Field(min_length=1)
    ref_no: str = Field(min_length=1)
    price: Decimal
    product_id: str | None = None
    product_category: str | None = None
    product_image: str | None = None

    @field_validator("price", mode="before")
    @classmethod
    def _lenient_price(cls, value: Any) -> Decimal:
        parsed = parse_leniently(value)
        if parsed is None or parsed <= 0:
            raise ValueError("price must be a positive amount")
        return Decimal(str(parsed))

    def to_intent(self) -> PurchaseIntent:
        return PurchaseIntent(
            customer_name=self.customer_name.strip(),
            customer_email=self.customer_email,
            product_title=self.product_title,
            ref_no=self.ref_no,
            price=self.price,
            customer_phone=self.customer_phone,
            customer_address=self.customer_address,
            customer_city=self.customer_city,
            customer_country=self.customer_country,
            product_id=self.product_id,
            product_category=self.product_category,
            product_image=self.product_image,
        )


class InvoiceIssuedResponse(BaseModel):
    invoice_id: str
    invoice_number: str | None = None
    paypal_status: str | None = None
    state: InvoiceState
    is_accessible: bool
    notified: bool
    customer_invoice_url: str | None = None


class InvoiceDetailResponse(BaseModel):
    invoice_id: str
    status: str | None = None
    invoice_number: str | None = None
    customer_invoice_url: str | None = None
    amount: dict[str, Any] | None = None
    due_date: str | None = None
    links: list[dict[str, Any]] = Field(default_factory=list)


class InvoiceAccessibilityResponse(BaseModel):
    invoice_id: str
    status: str | None = None
    invoice_number: str | None = None
    is_accessible: bool
