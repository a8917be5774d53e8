"""
Transactional email: message templates, outbox enqueueing and delivery.

Request handlers call the notify_* functions, which only write to the
outbox. The dispatcher drains the outbox after the response has been sent.
Message bodies are Jinja2 templates under packwell/templates/email.
"""

import logging
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from ..core.config import Settings, settings
from ..database.outbox import MessageStatus, OutboxDatabase, OutboxMessage, outbox_db
from ..database.users import user_db
from ..models.contact import Contact
from ..models.order import Order, OrderStatus
from .mail_client import MailClient

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
MISSING_CONFIG = "Email configuration missing"

STATUS_SUBJECTS: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "Your order {number} has been confirmed",
    OrderStatus.PROCESSING: "Your order {number} is being processed",
    OrderStatus.SHIPPED: "Your order {number} has shipped",
    OrderStatus.DELIVERED: "Your order {number} has been delivered",
    OrderStatus.COMPLETED: "Your order {number} is complete",
    OrderStatus.CANCELLED: "Your order {number} has been cancelled",
}


def money(amount: float) -> str:
    return f"₹{amount:,.2f}"


templates = Environment(
    loader=PackageLoader("packwell", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
templates.filters["money"] = money


def render(name: str, **context: Any) -> str:
    """Render an email body; every variable is HTML-escaped"""
    return templates.get_template(f"email/{name}.html").render(**context)


def _customer_email(order: Order) -> Optional[str]:
    user = user_db.get_user(order.user_id)
    return user.email if user else None


def _enqueue(to: Optional[str], subject: str, html: str, event: str) -> Optional[OutboxMessage]:
    if not to:
        logger.warning(f"No recipient for {event} email, not queued")
        return None
    message = outbox_db.enqueue(to=to, subject=subject, html=html, event=event)
    logger.debug(f"Queued {event} email to {to}")
    return message


# ==================== Orders ====================

def notify_order_placed(order: Order) -> None:
    """Queue the customer confirmation and the company notification"""
    _enqueue(
        _customer_email(order),
        f"Order confirmation - {order.order_number}",
        render("order_placed", order=order),
        "order_placed",
    )
    _enqueue(
        settings.company_inbox,
        f"New order received - {order.order_number}",
        render("order_placed_company", order=order),
        "order_placed_company",
    )


def notify_status_change(order: Order) -> None:
    """Queue the customer email for the order's current status"""
    status = order.order_status
    subject = STATUS_SUBJECTS.get(status)
    if subject is None:
        return
    if status == OrderStatus.SHIPPED and not order.tracking_number:
        return

    _enqueue(
        _customer_email(order),
        subject.format(number=order.order_number),
        render("order_status", order=order),
        f"order_{status.value}",
    )

    if status == OrderStatus.COMPLETED:
        _enqueue(
            settings.company_inbox,
            f"Order completed - {order.order_number}",
            render("order_completed_company", order=order),
            "order_completed_company",
        )


# ==================== Contact ====================

def notify_contact_received(contact: Contact) -> None:
    """Queue the sender's confirmation and the admin notification"""
    _enqueue(
        contact.email,
        "We received your message",
        render("contact_received", contact=contact),
        "contact_confirmation",
    )
    _enqueue(
        settings.admin_email,
        f"New contact form submission: {contact.subject.value}",
        render("contact_admin", contact=contact),
        "contact_admin",
    )


def notify_contact_response(contact: Contact) -> None:
    _enqueue(
        contact.email,
        "Response to your enquiry",
        render("contact_response", contact=contact),
        "contact_response",
    )


# ==================== Delivery ====================

class NotificationDispatcher:
    """
    Drains the outbox through the mail relay.

    Each flush claims every pending message. A failed send puts the message
    back to pending until it has been attempted MAX_ATTEMPTS times. Errors
    are logged here and never reach the caller.
    """

    def __init__(self, client: Optional[MailClient], outbox: OutboxDatabase = outbox_db):
        self.client = client
        self.outbox = outbox

    @classmethod
    def from_settings(cls, config: Settings, transport=None) -> "NotificationDispatcher":
        if not config.mail_configured:
            return cls(client=None)
        client = MailClient(
            relay_url=config.mail_relay_url,
            api_key=config.mail_api_key,
            sender=config.mail_from,
            timeout=config.mail_timeout_seconds,
            transport=transport,
        )
        return cls(client=client)

    async def flush(self) -> int:
        """Deliver pending messages; returns how many were sent"""
        messages = self.outbox.claim_pending()
        if not messages:
            return 0

        if self.client is None:
            logger.warning(f"{MISSING_CONFIG}; skipping {len(messages)} email(s)")
            for message in messages:
                self.outbox.mark_skipped(message, MISSING_CONFIG)
            return 0

        sent = 0
        for message in messages:
            try:
                await self.client.send(message.to, message.subject, message.html)
            except Exception as e:
                logger.exception(
                    f"Email {message.event} to {message.to} failed "
                    f"(attempt {message.attempts}/{MAX_ATTEMPTS})"
                )
                self.outbox.mark_failed(message, str(e), MAX_ATTEMPTS)
                if message.status == MessageStatus.FAILED:
                    logger.error(f"Giving up on email {message.id} after {message.attempts} attempts")
            else:
                self.outbox.mark_sent(message)
                sent += 1
                logger.info(f"Email sent: {message.event} to {message.to}")
        return sent

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher, built from settings on first use"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher.from_settings(settings)
    return _dispatcher


async def close_dispatcher() -> None:
    global _dispatcher
    if _dispatcher is not None:
        await _dispatcher.close()
        _dispatcher = None
