from fastapi import APIRouter, Depends

from src.api.dependencies import get_invoice_orchestrator
from src.api.schemas.invoices import (
    InvoiceAccessibilityResponse,
    InvoiceCreateRequest,
    InvoiceDetailResponse,
    InvoiceIssuedResponse,
)
from src.application.coordinators.invoice_orchestrator import InvoiceOrchestrator

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("", response_model=InvoiceIssuedResponse)
async def issue_invoice(
    body: InvoiceCreateRequest,
    orchestrator: InvoiceOrchestrator = Depends(get_invoice_orchestrator),
) -> InvoiceIssuedResponse:
    """Create and send a PayPal invoice; notify buyer and admin once it is viewable."""
    session = await orchestrator.issue(body.to_intent())
    return InvoiceIssuedResponse(
        invoice_id=session.invoice_id,
        invoice_number=session.invoice_number,
        paypal_status=session.provider_status,
        state=session.state,
        is_accessible=session.is_accessible,
        notified=session.notified,
        customer_invoice_url=session.customer_invoice_url,
    )


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(
    invoice_id: str,
    orchestrator: InvoiceOrchestrator = Depends(get_invoice_orchestrator),
) -> InvoiceDetailResponse:
    invoice = await orchestrator.get_invoice(invoice_id)
    return InvoiceDetailResponse(
        invoice_id=invoice.invoice_id,
        status=invoice.status,
        invoice_number=invoice.invoice_number,
        customer_invoice_url=invoice.customer_invoice_url,
        amount=invoice.amount,
        due_date=invoice.due_date,
        links=invoice.links,
    )


@router.get("/{invoice_id}/accessibility", response_model=InvoiceAccessibilityResponse)
async def check_invoice_accessibility(
    invoice_id: str,
    orchestrator: InvoiceOrchestrator = Depends(get_invoice_orchestrator),
) -> InvoiceAccessibilityResponse:
    check = await orchestrator.check_accessibility(invoice_id)
    return InvoiceAccessibilityResponse(
        invoice_id=check.invoice_id,
        status=check.status,
        invoice_number=check.invoice_number,
        is_accessible=check.is_accessible,
    )
