"""HTML bodies for the buyer and admin invoice e-mails."""
from html import escape

from src.application.interfaces.notifier import EmailMessage
from src.domain.entities.invoice import InvoiceSession, PurchaseIntent

_WRAPPER = (
    '<div style="font-family: Inter, Arial, sans-serif; background: #f5f7fb; padding: 24px; color: #111">'
    '<table role="presentation" width="100%" cellspacing="0" cellpadding="0" '
    'style="max-width: 640px; margin: 0 auto; background: #fff; border-radius: 12px">'
    "{rows}</table></div>"
)

_BADGE = (
    '<div style="display: inline-block; padding: 6px 10px; border-radius: 999px; '
    'background: {colour}; color: #fff; font-size: 12px; font-weight: 600; '
    'text-transform: uppercase">{label}</div>'
)


def _detail(label: str, value: str) -> str:
    return (
        '<div style="font-size: 12px; color: #555; margin-top: 4px">'
        f"{escape(label)}: <strong>{escape(value)}</strong></div>"
    )


def _product_block(intent: PurchaseIntent, extra: list[str]) -> str:
    details = [
        _detail("Reference ID", intent.ref_no),
        _detail("Price", f"${intent.price}"),
        *extra,
    ]
    return (
        '<tr><td style="padding: 0 24px 12px 24px">'
        '<div style="background: #fafafa; border: 1px solid #eee; border-radius: 8px; padding: 16px">'
        '<div style="font-size: 14px; color: #6b7280; margin-bottom: 6px">Product</div>'
        f'<div style="font-size: 16px; font-weight: 700">{escape(intent.product_title)}</div>'
        f"{''.join(details)}</div></td></tr>"
    )


def render_customer_email(intent: PurchaseIntent, session: InvoiceSession, *, site_name: str) -> EmailMessage:
    link = escape(session.customer_invoice_url or "", quote=True)
    header = (
        '<tr><td style="padding: 24px 24px 12px 24px">'
        + _BADGE.format(colour="#16a34a", label="Invoice ready")
        + '<h2 style="margin: 12px 0 4px 0; font-size: 22px">Your PayPal Invoice is Ready</h2>'
        '<p style="margin: 0; color: #555">We have generated a PayPal invoice for your purchase. '
        "Use the button below to view and complete your payment.</p></td></tr>"
    )
    product = _product_block(
        intent,
        [
            _detail("Invoice #", session.invoice_number or "N/A"),
            _detail("Invoice ID", session.invoice_id or "N/A"),
        ],
    )
    action = (
        '<tr><td style="padding: 0 24px 24px 24px; text-align: center">'
        f'<a href="{link}" style="display: inline-block; background: #0070ba; color: #fff; '
        'text-decoration: none; padding: 14px 28px; border-radius: 8px; font-weight: 600">'
        "View &amp; Pay Invoice on PayPal</a>"
        f'<p style="color: #6b7280; font-size: 14px">Or copy this link: <a href="{link}">{link}</a></p>'
        "</td></tr>"
    )
    footer = (
        '<tr><td style="padding: 16px 24px 24px 24px; color: #6b7280; font-size: 12px; border-top: 1px solid #eee">'
        f"This is an automated invoice email from {escape(site_name)}. "
        "If you have any questions, please contact our support team.</td></tr>"
    )
    return EmailMessage(
        to=intent.customer_email,
        subject=f"Invoice for {intent.product_title} - {site_name}",
        html_body=_WRAPPER.format(rows=header + product + action + footer),
    )


def render_admin_email(
    intent: PurchaseIntent, session: InvoiceSession, *, admin_email: str, site_name: str
) -> EmailMessage:
    header = (
        '<tr><td style="padding: 24px 24px 12px 24px">'
        + _BADGE.format(colour="#2563eb", label="Admin notification")
        + '<h2 style="margin: 12px 0 4px 0; font-size: 22px">New PayPal Invoice Generated</h2>'
        '<p style="margin: 0; color: #555">A customer has requested to buy a product and a '
        "PayPal invoice has been generated.</p></td></tr>"
    )
    product = _product_block(
        intent,
        [
            _detail("Customer", f"{intent.customer_name} <{intent.customer_email}>"),
            _detail("Invoice #", session.invoice_number or "N/A"),
            _detail("Invoice ID", session.invoice_id or "N/A"),
        ],
    )
    footer = (
        '<tr><td style="padding: 0 24px 24px 24px; color: #6b7280; font-size: 12px">'
        f"This is an automated admin notification email from {escape(site_name)}.</td></tr>"
    )
    return EmailMessage(
        to=admin_email,
        subject=f"New PayPal Invoice Generated - {intent.product_title}",
        html_body=_WRAPPER.format(rows=header + product + footer),
    )
