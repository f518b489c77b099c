"""HTTP client for the PayPal Invoicing v2 REST API."""
import asyncio
import re
import time
from typing import Any

import httpx
import structlog

from src.application.interfaces.invoice_provider import (
    InvoiceConfigurationError,
    InvoiceNotFoundError,
    InvoiceProvider,
    InvoiceProviderError,
    ProviderInvoice,
)
from src.config import settings
from src.domain.entities.invoice import PurchaseIntent

logger = structlog.get_logger(__name__)

LIVE_BASE_URL = "https://api-m.paypal.com"
SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"

LIVE_PAYER_VIEW_URL = "https://www.paypal.com/invoice/payerViewDetails/{invoice_id}"
SANDBOX_PAYER_VIEW_URL = "https://www.sandbox.paypal.com/invoice/payerViewDetails/{invoice_id}"

CURRENCY = "USD"
# Refresh the bearer token this long before PayPal says it expires
TOKEN_EXPIRY_MARGIN_SECONDS = 60

_NON_DIGITS = re.compile(r"\D")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error_description") or body)
    return str(body)


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class PayPalClient(InvoiceProvider):
    """Thin HTTP wrapper around PayPal's OAuth2 and invoicing endpoints."""

    def __init__(
        self,
        client_id: str = settings.paypal_client_id,
        client_secret: str = settings.paypal_client_secret,
        business_email: str = settings.paypal_business_email,
        mode: str = settings.paypal_mode,
        site_name: str = settings.site_name,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id.strip()
        self._client_secret = client_secret.strip()
        self._business_email = business_email.strip()
        self._live = mode.strip().lower() == "live"
        self._base_url = LIVE_BASE_URL if self._live else SANDBOX_BASE_URL
        self._site_name = site_name
        self._transport = transport

        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def get_access_token(self) -> str:
        async with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            async with self._client() as client:
                try:
                    response = await client.post(
                        f"{self._base_url}/v1/oauth2/token",
                        data={"grant_type": "client_credentials"},
                        auth=(self._client_id, self._client_secret),
                        headers={"Accept": "application/json"},
                    )
                    response.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    logger.error(
                        "paypal_auth_failed",
                        status_code=exc.response.status_code,
                        response=exc.response.text,
                    )
                    raise InvoiceProviderError(
                        f"PayPal authentication failed: {_error_message(exc.response)}",
                        _error_detail(exc.response),
                    ) from exc
                except httpx.RequestError as exc:
                    logger.error("paypal_connection_failed", error=str(exc))
                    raise InvoiceProviderError(f"Failed to reach PayPal: {exc}") from exc

            data = response.json()
            self._token = data["access_token"]
            self._token_expires_at = (
                time.monotonic() + float(data.get("expires_in", 0)) - TOKEN_EXPIRY_MARGIN_SECONDS
            )
            logger.info("paypal_token_obtained", expires_in=data.get("expires_in"))
            return self._token

    # -------------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------------

    async def create_invoice(self, intent: PurchaseIntent) -> ProviderInvoice:
        if not self._business_email:
            raise InvoiceConfigurationError(
                "PayPal business email not configured. Set PAYPAL_BUSINESS_EMAIL "
                "to a valid PayPal business account email."
            )

        data = await self._request(
            "POST", "/v2/invoicing/invoices", json=self._invoice_payload(intent), action="create"
        )

        invoice_id = data.get("id")
        if not invoice_id and data.get("href"):
            invoice_id = data["href"].rstrip("/").split("/")[-1]
        if not invoice_id:
            raise InvoiceProviderError("PayPal did not return an invoice id.", data)

        try:
            created = await self.get_invoice(invoice_id)
        except (InvoiceProviderError, InvoiceNotFoundError) as exc:
            logger.warning("paypal_invoice_details_unavailable", invoice_id=invoice_id, error=str(exc))
            created = self._to_invoice(invoice_id, {"status": "CREATED", "detail": {}, "links": []})

        logger.info(
            "paypal_invoice_created",
            invoice_id=invoice_id,
            invoice_number=created.invoice_number,
            status=created.status,
        )
        return created

    async def send_invoice(self, invoice_id: str) -> None:
        await self._request(
            "POST", f"/v2/invoicing/invoices/{invoice_id}/send", json={}, action="send"
        )
        logger.info("paypal_invoice_sent", invoice_id=invoice_id)

    async def get_invoice(self, invoice_id: str) -> ProviderInvoice:
        data = await self._request(
            "GET", f"/v2/invoicing/invoices/{invoice_id}", action="get", invoice_id=invoice_id
        )
        return self._to_invoice(invoice_id, data)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=30.0, transport=self._transport)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: dict[str, Any] | None = None,
        invoice_id: str | None = None,
    ) -> dict[str, Any]:
        token = await self.get_access_token()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}

        async with self._client() as client:
            try:
                response = await client.request(
                    method, f"{self._base_url}{path}", json=json, headers=headers
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 404 and invoice_id is not None:
                    raise InvoiceNotFoundError(invoice_id) from exc
                logger.error(
                    "paypal_request_failed",
                    action=action,
                    status_code=exc.response.status_code,
                    response=exc.response.text,
                )
                raise InvoiceProviderError(
                    f"PayPal {action} failed ({exc.response.status_code}): "
                    f"{_error_message(exc.response)}",
                    _error_detail(exc.response),
                ) from exc
            except httpx.RequestError as exc:
                logger.error("paypal_connection_failed", action=action, error=str(exc))
                raise InvoiceProviderError(f"Failed to reach PayPal: {exc}") from exc

        if not response.content:
            return {}
        return response.json()

    def _to_invoice(self, invoice_id: str, data: dict[str, Any]) -> ProviderInvoice:
        detail = data.get("detail") or {}
        if self._live:
            view_url = LIVE_PAYER_VIEW_URL.format(invoice_id=invoice_id)
        else:
            view_url = (detail.get("metadata") or {}).get(
                "recipient_view_url"
            ) or SANDBOX_PAYER_VIEW_URL.format(invoice_id=invoice_id)

        return ProviderInvoice(
            invoice_id=data.get("id") or invoice_id,
            status=data.get("status"),
            invoice_number=detail.get("invoice_number") or data.get("invoice_number"),
            customer_invoice_url=view_url,
            amount=data.get("amount"),
            due_date=detail.get("due_date") or data.get("due_date"),
            links=data.get("links") or [],
        )

    def _invoice_payload(self, intent: PurchaseIntent) -> dict[str, Any]:
        price = str(intent.price)
        name = {"given_name": intent.given_name, "surname": intent.surname}
        address = {
            "address_line_1": intent.customer_address or "N/A",
            "admin_area_2": intent.customer_city or "N/A",
            "admin_area_1": intent.customer_country or "N/A",
            "country_code": "US",
        }
        recipient: dict[str, Any] = {
            "billing_info": {
                "name": name,
                "email_address": intent.customer_email,
                "address": address,
            },
            "shipping_info": {"name": name, "address": address},
        }
        phone = _NON_DIGITS.sub("", intent.customer_phone)[-10:]
        if phone:
            recipient["billing_info"]["phone_contact"] = {
                "phone_number_details": {"country_code": "1", "national_number": phone}
            }

        return {
            "detail": {
                "currency_code": CURRENCY,
                "note": f"Invoice for {intent.product_title} - Ref: {intent.ref_no}",
                "terms": "Payment due upon receipt",
                "memo": f"Thank you for your purchase from {self._site_name}",
            },
            "invoicer": {
                "name": {"given_name": self._site_name},
                "email_address": self._business_email,
            },
            "primary_recipients": [recipient],
            "items": [
                {
                    "name": intent.product_title,
                    "description": f"Product Reference: {intent.ref_no}",
                    "quantity": "1",
                    "unit_amount": {"currency_code": CURRENCY, "value": price},
                    "unit_of_measure": "QUANTITY",
                }
            ],
            "configuration": {
                "allow_tip": False,
                "tax_calculated_after_discount": False,
                "tax_inclusive": False,
            },
            "amount": {
                "currency_code": CURRENCY,
                "value": price,
                "breakdown": {"item_total": {"currency_code": CURRENCY, "value": price}},
            },
        }
