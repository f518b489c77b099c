"""Integration tests for the invoice routes. PayPal and the mailer are faked."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from fakes import RecordingNotifier
from src.api.dependencies import get_invoice_orchestrator
from src.api.main import app
from src.application.coordinators.invoice_orchestrator import InvoiceOrchestrator
from src.application.interfaces.invoice_provider import (
    InvoiceConfigurationError,
    InvoiceNotFoundError,
    ProviderInvoice,
)

INVOICE_BODY = {
    "customerName": "Amara Okafor",
    "customerEmail": "amara@example.com",
    "customerPhone": "555-010-9999",
    "productTitle": "Toyota Hiace",
    "refNo": "VEH-000123",
    "price": "$12,000.00",
}


def _make_provider(status: str = "SENT") -> MagicMock:
    invoice = ProviderInvoice(
        invoice_id="INV2-AAAA",
        status=status,
        invoice_number="0042",
        customer_invoice_url="https://www.sandbox.paypal.com/invoice/payerViewDetails/INV2-AAAA",
    )
    provider = MagicMock()
    provider.create_invoice = AsyncMock(return_value=invoice)
    provider.send_invoice = AsyncMock()
    provider.get_invoice = AsyncMock(return_value=invoice)
    return provider


def _install(provider: MagicMock, notifier: RecordingNotifier | None = None) -> RecordingNotifier:
    notifier = notifier or RecordingNotifier()
    app.dependency_overrides[get_invoice_orchestrator] = lambda: InvoiceOrchestrator(
        provider,
        notifier,
        admin_email="ops@example.com",
        site_name="Autexline",
        grace_seconds=0,
    )
    return notifier


@pytest.fixture()
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestIssueInvoice:
    def test_issues_and_notifies(self, client: TestClient) -> None:
        provider = _make_provider("SENT")
        notifier = _install(provider)

        response = client.post("/invoices", json=INVOICE_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["invoice_id"] == "INV2-AAAA"
        assert data["paypal_status"] == "SENT"
        assert data["state"] == "accessible"
        assert data["is_accessible"] is True
        assert data["notified"] is True
        assert len(notifier.sent) == 2

        intent = provider.create_invoice.await_args.args[0]
        assert str(intent.price) == "12000.00"

    def test_undelivered_buyer_email_reported(self, client: TestClient) -> None:
        _install(_make_provider("SENT"), RecordingNotifier(failing_recipients=("amara@example.com",)))

        response = client.post("/invoices", json=INVOICE_BODY)

        assert response.status_code == 200
        assert response.json()["notified"] is False

    def test_not_viewable_invoice_is_not_announced(self, client: TestClient) -> None:
        notifier = _install(_make_provider("DRAFT"))

        response = client.post("/invoices", json=INVOICE_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["is_accessible"] is False
        assert data["notified"] is False
        assert notifier.sent == []

    @pytest.mark.parametrize("price", ["free", "0", "0.00", ""])
    def test_bad_price_is_422(self, client: TestClient, price: str) -> None:
        provider = _make_provider()
        _install(provider)

        response = client.post("/invoices", json={**INVOICE_BODY, "price": price})

        assert response.status_code == 422
        provider.create_invoice.assert_not_awaited()

    def test_numeric_price_accepted(self, client: TestClient) -> None:
        provider = _make_provider()
        _install(provider)

        response = client.post("/invoices", json={**INVOICE_BODY, "price": 950.5})

        assert response.status_code == 200

    def test_bad_email_is_422(self, client: TestClient) -> None:
        _install(_make_provider())

        response = client.post("/invoices", json={**INVOICE_BODY, "customerEmail": "not-an-email"})

        assert response.status_code == 422

    def test_missing_business_email_is_502(self, client: TestClient) -> None:
        provider = _make_provider()
        provider.create_invoice = AsyncMock(
            side_effect=InvoiceConfigurationError("PayPal business email not configured.")
        )
        _install(provider)

        response = client.post("/invoices", json=INVOICE_BODY)

        assert response.status_code == 502
        assert response.json()["service"] == "invoice_provider"
        provider.send_invoice.assert_not_awaited()


class TestInvoiceLookups:
    def test_get_invoice(self, client: TestClient) -> None:
        _install(_make_provider())

        response = client.get("/invoices/INV2-AAAA")

        assert response.status_code == 200
        assert response.json()["invoice_number"] == "0042"

    def test_unknown_invoice_is_404(self, client: TestClient) -> None:
        provider = _make_provider()
        provider.get_invoice = AsyncMock(side_effect=InvoiceNotFoundError("INV2-NOPE"))
        _install(provider)

        response = client.get("/invoices/INV2-NOPE")

        assert response.status_code == 404

    def test_accessibility(self, client: TestClient) -> None:
        _install(_make_provider("PAID"))

        response = client.get("/invoices/INV2-AAAA/accessibility")

        assert response.status_code == 200
        assert response.json()["is_accessible"] is True
