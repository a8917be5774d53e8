"""Tests for the email outbox and its dispatcher."""

import asyncio

import httpx
import pytest

from packwell.core.config import settings
from packwell.database import MessageStatus, contact_db, outbox_db
from packwell.services.mail_client import MailClient
from packwell.services.notifications import (
    MAX_ATTEMPTS,
    NotificationDispatcher,
    money,
    notify_contact_received,
    render,
)

from .conftest import MailRecorder


def flush(dispatcher):
    return asyncio.run(dispatcher.flush())


class TestOrderEmails:
    def test_order_placed_emails_customer_and_company(
        self, customer, customer_headers, product_a, add_to_cart, checkout, mail_dispatcher, mail_recorder
    ):
        add_to_cart(customer_headers, product_a, 2)

        response = checkout(customer_headers)
        assert response.status_code == 201
        order_number = response.json()["data"]["order"]["orderNumber"]

        assert sorted(mail_recorder.recipients) == sorted([customer.email, settings.company_inbox])
        assert all(order_number in m["subject"] for m in mail_recorder.messages)
        assert all(m.status == MessageStatus.SENT for m in outbox_db.list_messages())

    def test_relay_request_format(
        self, customer_headers, product_a, add_to_cart, checkout, mail_dispatcher, mail_recorder
    ):
        add_to_cart(customer_headers, product_a, 1)
        checkout(customer_headers)

        message = mail_recorder.messages[0]
        assert set(message) == {"to", "from", "subject", "html"}
        assert message["from"] == "Packwell <no-reply@packwell.test>"
        assert mail_recorder.headers[0]["authorization"] == "Bearer test-key"

    def test_order_succeeds_when_relay_fails(
        self, customer_headers, product_a, add_to_cart, checkout, mail_dispatcher, mail_recorder
    ):
        mail_recorder.status_code = 503
        add_to_cart(customer_headers, product_a, 1)

        response = checkout(customer_headers)
        assert response.status_code == 201

        messages = outbox_db.list_messages()
        assert len(messages) == 2
        assert all(m.status == MessageStatus.PENDING for m in messages)
        assert all(m.attempts == 1 for m in messages)
        assert all("503" in m.last_error for m in messages)

    def test_order_succeeds_without_mail_config(
        self, customer_headers, product_a, add_to_cart, checkout, silent_dispatcher
    ):
        add_to_cart(customer_headers, product_a, 1)

        response = checkout(customer_headers)
        assert response.status_code == 201

        messages = outbox_db.list_messages()
        assert len(messages) == 2
        assert all(m.status == MessageStatus.SKIPPED for m in messages)
        assert all(m.last_error == "Email configuration missing" for m in messages)

    def test_shipping_email_needs_tracking_number(
        self, customer, customer_headers, product_a, add_to_cart, checkout, set_status, mail_dispatcher, mail_recorder
    ):
        add_to_cart(customer_headers, product_a, 1)
        order_id = checkout(customer_headers).json()["data"]["order"]["id"]
        set_status(order_id, "confirmed")
        set_status(order_id, "processing")
        sent_before = len(mail_recorder.messages)

        set_status(order_id, "shipped")
        assert len(mail_recorder.messages) == sent_before

        set_status(order_id, "shipped", trackingNumber="AWB-42")
        assert len(mail_recorder.messages) == sent_before + 1
        assert "AWB-42" in mail_recorder.messages[-1]["html"]
        assert mail_recorder.messages[-1]["to"] == customer.email

    def test_completed_order_notifies_company(
        self, customer, customer_headers, product_a, add_to_cart, checkout, set_status, mail_dispatcher, mail_recorder
    ):
        add_to_cart(customer_headers, product_a, 1)
        order_id = checkout(customer_headers).json()["data"]["order"]["id"]
        for status in ("confirmed", "processing"):
            set_status(order_id, status)
        set_status(order_id, "shipped", trackingNumber="AWB-1")
        set_status(order_id, "delivered")
        sent_before = len(mail_recorder.messages)

        set_status(order_id, "completed")
        assert mail_recorder.recipients[sent_before:] == [customer.email, settings.company_inbox]

    def test_customer_html_is_escaped(
        self, client, customer_headers, product_a, add_to_cart, mail_dispatcher, mail_recorder
    ):
        add_to_cart(customer_headers, product_a, 1)
        client.post(
            "/api/orders",
            json={
                "shippingAddress": {
                    "name": "<b>Asha</b>",
                    "phone": "9876543210",
                    "address": "14 Industrial Estate, Phase 2",
                    "city": "Mumbai",
                    "state": "Maharashtra",
                    "pincode": "400001",
                }
            },
            headers=customer_headers,
        )
        assert "<b>Asha</b>" not in mail_recorder.messages[0]["html"]
        assert "&lt;b&gt;Asha&lt;/b&gt;" in mail_recorder.messages[0]["html"]


class TestDispatcher:
    @pytest.fixture
    def failing_recorder(self):
        return MailRecorder(status_code=500)

    @pytest.fixture
    def dispatcher(self, failing_recorder):
        client = MailClient(
            relay_url="https://mail.test/v1/send",
            api_key="test-key",
            sender="store@packwell.test",
            transport=httpx.MockTransport(failing_recorder),
        )
        return NotificationDispatcher(client=client)

    def test_gives_up_after_max_attempts(self, dispatcher, failing_recorder):
        message = outbox_db.enqueue("a@example.com", "Hello", "<p>Hi</p>", "test")

        for attempt in range(1, MAX_ATTEMPTS + 1):
            assert flush(dispatcher) == 0
            assert message.attempts == attempt

        assert message.status == MessageStatus.FAILED
        assert len(failing_recorder.messages) == MAX_ATTEMPTS

        flush(dispatcher)
        assert len(failing_recorder.messages) == MAX_ATTEMPTS

    def test_recovers_on_retry(self, dispatcher, failing_recorder):
        message = outbox_db.enqueue("a@example.com", "Hello", "<p>Hi</p>", "test")
        flush(dispatcher)
        assert message.status == MessageStatus.PENDING

        failing_recorder.status_code = 200
        assert flush(dispatcher) == 1
        assert message.status == MessageStatus.SENT
        assert message.sent_at is not None
        assert message.last_error is None

    def test_unreachable_relay_is_logged_not_raised(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = MailClient(
            relay_url="https://mail.test/v1/send",
            api_key="test-key",
            sender="store@packwell.test",
            transport=httpx.MockTransport(refuse),
        )
        message = outbox_db.enqueue("a@example.com", "Hello", "<p>Hi</p>", "test")

        assert flush(NotificationDispatcher(client=client)) == 0
        assert message.status == MessageStatus.PENDING
        assert "connection refused" in message.last_error

    def test_nothing_pending(self, dispatcher, failing_recorder):
        assert flush(dispatcher) == 0
        assert failing_recorder.messages == []

    def test_unconfigured_from_settings(self):
        unconfigured = settings.model_copy(update={"mail_relay_url": None, "mail_api_key": None})
        dispatcher = NotificationDispatcher.from_settings(unconfigured)
        assert dispatcher.client is None


class TestTemplates:
    @pytest.fixture
    def contact(self):
        return contact_db.create_contact(
            first_name="<i>Meera</i>",
            last_name="Shah",
            email="meera@example.com",
            phone="9988776655",
            subject="order",
            message="Where is my order? <script>alert(1)</script>",
        )

    def test_contact_emails_escape_every_field(self, contact):
        notify_contact_received(contact)

        confirmation, admin_copy = [m.html for m in outbox_db.list_messages()]
        for body in (confirmation, admin_copy):
            assert "<script>" not in body
            assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
        assert "&lt;i&gt;Meera&lt;/i&gt;" in confirmation
        assert "&lt;i&gt;Meera&lt;/i&gt; Shah" in admin_copy

    def test_order_email_lists_items_and_totals(self, placed_order, product_a):
        body = outbox_db.list_messages()[0].html
        assert product_a.name in body
        assert "₹400.00" in body
        assert "₹50.00" in body
        assert "₹450.00" in body
        assert "COD" in body

    def test_cancelled_email_carries_reason(self, placed_order, set_status):
        set_status(placed_order["id"], "cancelled", cancellationReason="Out of <stock>")

        body = outbox_db.list_messages()[-1].html
        assert "Reason: Out of &lt;stock&gt;" in body

    def test_money_format(self):
        assert money(12500) == "₹12,500.00"

    def test_render_loads_packaged_template(self, contact):
        body = render("contact_response", contact=contact)
        assert "Your original message:" in body
