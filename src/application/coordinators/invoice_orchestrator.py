import asyncio
from dataclasses import dataclass

import structlog

from src.application.coordinators.invoice_emails import render_admin_email, render_customer_email
from src.application.interfaces.invoice_provider import (
    InvoiceNotFoundError,
    InvoiceProvider,
    InvoiceProviderError,
    ProviderInvoice,
)
from src.application.interfaces.notifier import EmailMessage, Notifier
from src.domain.entities.invoice import (
    ACCESSIBLE_STATUSES,
    InvoiceSession,
    InvoiceState,
    PurchaseIntent,
)
from src.domain.exceptions import ValidationError

logger = structlog.get_logger(__name__)


@dataclass
class AccessibilityCheck:
    invoice_id: str
    status: str | None
    invoice_number: str | None
    is_accessible: bool


class InvoiceOrchestrator:
    """
    Drives one purchase through the external invoicing provider.

    create -> send -> wait -> re-fetch -> notify. Buyer and admin e-mails go
    out only after the re-fetch confirms the buyer can actually open the
    invoice; a send call that merely returned 2xx is not enough.
    """

    def __init__(
        self,
        provider: InvoiceProvider,
        notifier: Notifier,
        *,
        admin_email: str,
        site_name: str,
        grace_seconds: float = 3.0,
    ) -> None:
        self._provider = provider
        self._notifier = notifier
        self._admin_email = admin_email
        self._site_name = site_name
        self._grace_seconds = grace_seconds

    async def create_invoice(self, intent: PurchaseIntent) -> InvoiceSession:
        created = await self._provider.create_invoice(intent)
        logger.info(
            "invoice_created",
            invoice_id=created.invoice_id,
            invoice_number=created.invoice_number,
            ref_no=intent.ref_no,
        )
        return InvoiceSession(
            invoice_id=created.invoice_id,
            invoice_number=created.invoice_number,
            provider_status=created.status,
            customer_invoice_url=created.customer_invoice_url,
            state=InvoiceState.CREATED,
        )

    async def send_invoice(self, session: InvoiceSession) -> InvoiceSession:
        if not session.invoice_id:
            raise ValidationError("Invoice ID is required to send an invoice.")
        await self._provider.send_invoice(session.invoice_id)
        session.state = InvoiceState.SENT
        logger.info("invoice_sent", invoice_id=session.invoice_id)
        return session

    async def await_accessibility(self, session: InvoiceSession) -> InvoiceSession:
        # The provider needs a moment after send before the payer view resolves
        await asyncio.sleep(self._grace_seconds)
        try:
            current = await self._provider.get_invoice(session.invoice_id)
        except (InvoiceProviderError, InvoiceNotFoundError) as exc:
            logger.warning(
                "invoice_accessibility_check_failed",
                invoice_id=session.invoice_id,
                error=str(exc),
            )
            session.is_accessible = False
            session.state = InvoiceState.INACCESSIBLE
            return session

        session.provider_status = current.status
        session.invoice_number = current.invoice_number or session.invoice_number
        session.customer_invoice_url = current.customer_invoice_url or session.customer_invoice_url
        session.is_accessible = current.status in ACCESSIBLE_STATUSES
        session.state = InvoiceState.ACCESSIBLE if session.is_accessible else InvoiceState.INACCESSIBLE
        logger.info(
            "invoice_accessibility_checked",
            invoice_id=session.invoice_id,
            status=current.status,
            is_accessible=session.is_accessible,
        )
        return session

    async def notify_if_accessible(self, intent: PurchaseIntent, session: InvoiceSession) -> bool:
        if not session.is_accessible:
            logger.info(
                "invoice_notification_skipped",
                invoice_id=session.invoice_id,
                status=session.provider_status,
            )
            return False

        customer_sent = await self._deliver(
            render_customer_email(intent, session, site_name=self._site_name)
        )
        if self._admin_email:
            await self._deliver(
                render_admin_email(
                    intent, session, admin_email=self._admin_email, site_name=self._site_name
                )
            )
        else:
            logger.warning("invoice_admin_email_not_configured", invoice_id=session.invoice_id)

        session.notified = customer_sent
        return True

    async def issue(self, intent: PurchaseIntent) -> InvoiceSession:
        session = await self.create_invoice(intent)
        await self.send_invoice(session)
        await self.await_accessibility(session)
        await self.notify_if_accessible(intent, session)
        return session

    async def get_invoice(self, invoice_id: str) -> ProviderInvoice:
        return await self._provider.get_invoice(invoice_id)

    async def check_accessibility(self, invoice_id: str) -> AccessibilityCheck:
        current = await self._provider.get_invoice(invoice_id)
        return AccessibilityCheck(
            invoice_id=current.invoice_id,
            status=current.status,
            invoice_number=current.invoice_number,
            is_accessible=current.status in ACCESSIBLE_STATUSES,
        )

    async def _deliver(self, message: EmailMessage) -> bool:
        try:
            await self._notifier.send(message)
        except Exception as exc:
            logger.error("invoice_email_failed", to=message.to, subject=message.subject, error=str(exc))
            return False
        return True
