"""Unit tests for the PayPal client against a mocked HTTP transport."""
import json
from decimal import Decimal

import httpx
import pytest

from src.application.interfaces.invoice_provider import (
    InvoiceConfigurationError,
    InvoiceNotFoundError,
    InvoiceProviderError,
)
from src.domain.entities.invoice import PurchaseIntent
from src.infrastructure.external_services.paypal_client import PayPalClient


def _intent(**overrides: object) -> PurchaseIntent:
    fields: dict = {  # type: ignore[type-arg]
        "customer_name": "Amara Okafor",
        "customer_email": "amara@example.com",
        "product_title": "Toyota Hiace",
        "ref_no": "VEH-000123",
        "price": Decimal("12000.00"),
        "customer_phone": "+1 (555) 010-9999",
    }
    fields.update(overrides)
    return PurchaseIntent(**fields)


class FakePayPal:
    """Routes requests by method and path, recording every call."""

    def __init__(self, *, invoice_status: str = "SENT", create_body: dict | None = None) -> None:  # type: ignore[type-arg]
        self.calls: list[httpx.Request] = []
        self.invoice_status = invoice_status
        self.create_body = create_body if create_body is not None else {"id": "INV2-AAAA"}
        self.fail_token = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path

        if path == "/v1/oauth2/token":
            if self.fail_token:
                return httpx.Response(401, json={"error_description": "Client Authentication failed"})
            return httpx.Response(200, json={"access_token": "tok-1", "expires_in": 32400})
        if request.method == "POST" and path == "/v2/invoicing/invoices":
            return httpx.Response(201, json=self.create_body)
        if request.method == "POST" and path.endswith("/send"):
            return httpx.Response(202)
        if request.method == "GET" and path == "/v2/invoicing/invoices/INV2-AAAA":
            return httpx.Response(
                200,
                json={
                    "id": "INV2-AAAA",
                    "status": self.invoice_status,
                    "detail": {"invoice_number": "0042", "metadata": {}},
                    "amount": {"currency_code": "USD", "value": "12000.00"},
                    "links": [],
                },
            )
        if request.method == "GET":
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})
        return httpx.Response(422, json={"message": "Unprocessable"})

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.calls]


def _make_client(fake: FakePayPal, *, business_email: str = "sales@example.com", mode: str = "sandbox") -> PayPalClient:
    return PayPalClient(
        client_id="cid",
        client_secret="secret",
        business_email=business_email,
        mode=mode,
        site_name="Autexline",
        transport=httpx.MockTransport(fake),
    )


class TestAccessToken:
    @pytest.mark.asyncio
    async def test_token_cached_across_calls(self) -> None:
        fake = FakePayPal()
        client = _make_client(fake)

        await client.get_invoice("INV2-AAAA")
        await client.get_invoice("INV2-AAAA")

        assert fake.paths().count("POST /v1/oauth2/token") == 1
        bearer = fake.calls[-1].headers["Authorization"]
        assert bearer == "Bearer tok-1"

    @pytest.mark.asyncio
    async def test_token_request_uses_basic_auth(self) -> None:
        fake = FakePayPal()

        await _make_client(fake).get_access_token()

        token_request = fake.calls[0]
        assert token_request.headers["Authorization"].startswith("Basic ")
        assert token_request.content == b"grant_type=client_credentials"

    @pytest.mark.asyncio
    async def test_auth_failure_raises_provider_error(self) -> None:
        fake = FakePayPal()
        fake.fail_token = True

        with pytest.raises(InvoiceProviderError) as exc_info:
            await _make_client(fake).get_access_token()

        assert "Client Authentication failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_live_mode_uses_live_host(self) -> None:
        fake = FakePayPal()

        await _make_client(fake, mode="live").get_access_token()

        assert fake.calls[0].url.host == "api-m.paypal.com"


class TestCreateInvoice:
    @pytest.mark.asyncio
    async def test_creates_and_fetches_details(self) -> None:
        fake = FakePayPal(invoice_status="DRAFT")

        invoice = await _make_client(fake).create_invoice(_intent())

        assert invoice.invoice_id == "INV2-AAAA"
        assert invoice.invoice_number == "0042"
        assert invoice.status == "DRAFT"
        assert invoice.customer_invoice_url == (
            "https://www.sandbox.paypal.com/invoice/payerViewDetails/INV2-AAAA"
        )

    @pytest.mark.asyncio
    async def test_payload_shape(self) -> None:
        fake = FakePayPal()

        await _make_client(fake).create_invoice(_intent())

        create = next(r for r in fake.calls if r.url.path == "/v2/invoicing/invoices")
        body = json.loads(create.content)
        assert body["invoicer"]["email_address"] == "sales@example.com"
        assert body["items"][0]["unit_amount"] == {"currency_code": "USD", "value": "12000.00"}
        assert body["amount"]["value"] == "12000.00"
        assert body["detail"]["note"] == "Invoice for Toyota Hiace - Ref: VEH-000123"
        billing = body["primary_recipients"][0]["billing_info"]
        assert billing["name"] == {"given_name": "Amara", "surname": "Okafor"}
        assert billing["phone_contact"]["phone_number_details"]["national_number"] == "5550109999"

    @pytest.mark.asyncio
    async def test_invoice_id_taken_from_href(self) -> None:
        fake = FakePayPal(
            create_body={
                "rel": "self",
                "href": "https://api-m.sandbox.paypal.com/v2/invoicing/invoices/INV2-AAAA",
            }
        )

        invoice = await _make_client(fake).create_invoice(_intent())

        assert invoice.invoice_id == "INV2-AAAA"

    @pytest.mark.asyncio
    async def test_missing_invoice_id_is_provider_error(self) -> None:
        fake = FakePayPal(create_body={})

        with pytest.raises(InvoiceProviderError):
            await _make_client(fake).create_invoice(_intent())

    @pytest.mark.asyncio
    async def test_missing_business_email_fails_before_any_request(self) -> None:
        fake = FakePayPal()

        with pytest.raises(InvoiceConfigurationError):
            await _make_client(fake, business_email="  ").create_invoice(_intent())

        assert fake.calls == []


class TestInvoiceLookups:
    @pytest.mark.asyncio
    async def test_unknown_invoice_not_found(self) -> None:
        fake = FakePayPal()

        with pytest.raises(InvoiceNotFoundError):
            await _make_client(fake).get_invoice("INV2-MISSING")

    @pytest.mark.asyncio
    async def test_send_posts_to_send_endpoint(self) -> None:
        fake = FakePayPal()

        await _make_client(fake).send_invoice("INV2-AAAA")

        assert "POST /v2/invoicing/invoices/INV2-AAAA/send" in fake.paths()

    @pytest.mark.asyncio
    async def test_live_view_url(self) -> None:
        invoice = await _make_client(FakePayPal(), mode="live").get_invoice("INV2-AAAA")

        assert invoice.customer_invoice_url == "https://www.paypal.com/invoice/payerViewDetails/INV2-AAAA"
