"""Pytest fixtures for the store API tests."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from packwell.database import category_db, product_db, reset_all, user_db
from packwell.main import app
from packwell.models.product import ProductImage
from packwell.models.user import UserRole
from packwell.security.auth_middleware import issue_token
from packwell.services.mail_client import MailClient
from packwell.services.notifications import NotificationDispatcher, get_dispatcher

SHIPPING_ADDRESS = {
    "name": "Asha Patel",
    "phone": "9876543210",
    "address": "14 Industrial Estate, Phase 2",
    "city": "Mumbai",
    "state": "Maharashtra",
    "pincode": "400001",
}


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


class MailRecorder:
    """httpx mock transport handler that records relay requests"""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.messages = []
        self.headers = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.messages.append(json.loads(request.content))
        self.headers.append(dict(request.headers))
        return httpx.Response(self.status_code, json={"id": f"msg-{len(self.messages)}"})

    @property
    def recipients(self) -> list:
        return [m["to"] for m in self.messages]


@pytest.fixture(autouse=True)
def clean_stores():
    """Start every test with empty stores and no overrides."""
    reset_all()
    app.dependency_overrides.clear()
    yield
    reset_all()
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def silent_dispatcher():
    """Dispatcher with no relay configured."""
    dispatcher = NotificationDispatcher(client=None)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return dispatcher


@pytest.fixture
def mail_recorder():
    return MailRecorder()


@pytest.fixture
def mail_dispatcher(mail_recorder):
    """Dispatcher that delivers into mail_recorder."""
    mail_client = MailClient(
        relay_url="https://mail.test/v1/send",
        api_key="test-key",
        sender="Packwell <no-reply@packwell.test>",
        transport=httpx.MockTransport(mail_recorder),
    )
    dispatcher = NotificationDispatcher(client=mail_client)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return dispatcher


@pytest.fixture
def customer():
    return user_db.create_user(name="Asha Patel", email="asha@example.com", phone="9876543210")


@pytest.fixture
def other_customer():
    return user_db.create_user(name="Ravi Kumar", email="ravi@example.com", phone="9123456780")


@pytest.fixture
def admin():
    return user_db.create_user(name="Store Admin", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def customer_headers(customer):
    return bearer(customer)


@pytest.fixture
def other_headers(other_customer):
    return bearer(other_customer)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def category():
    return category_db.create_category(name="Bottles", description="PET and HDPE bottles")


@pytest.fixture
def product_a(category):
    return product_db.create_product(
        name="PET Bottle 500ml",
        description="Clear PET bottle with a 28mm neck",
        price=200.0,
        category_id=category.id,
        stock=10,
        sku="PW-BTL-500",
        images=[ProductImage(url="/img/pet-500.jpg")],
        tags=["pet", "bottle"],
    )


@pytest.fixture
def product_b(category):
    return product_db.create_product(
        name="HDPE Bottle 1L",
        description="Opaque HDPE bottle for detergents",
        price=120.0,
        category_id=category.id,
        stock=5,
        sku="PW-BTL-1000",
        tags=["hdpe", "bottle"],
    )


@pytest.fixture
def add_to_cart(client):
    def _add(headers, product, quantity=1):
        response = client.post(
            "/api/cart/add",
            json={"productId": product.id, "quantity": quantity},
            headers=headers,
        )
        assert response.status_code == 200, response.json()
        return response.json()["data"]["cart"]

    return _add


@pytest.fixture
def checkout(client):
    def _checkout(headers, **extra):
        return client.post(
            "/api/orders",
            json={"shippingAddress": SHIPPING_ADDRESS, **extra},
            headers=headers,
        )

    return _checkout


@pytest.fixture
def placed_order(customer_headers, product_a, add_to_cart, checkout, silent_dispatcher):
    """A pending order for two units of product_a."""
    add_to_cart(customer_headers, product_a, 2)
    response = checkout(customer_headers)
    assert response.status_code == 201, response.json()
    return response.json()["data"]["order"]


@pytest.fixture
def set_status(client, admin_headers):
    def _set(order_id, status, **extra):
        return client.put(
            f"/api/orders/{order_id}/status",
            json={"orderStatus": status, **extra},
            headers=admin_headers,
        )

    return _set


@pytest.fixture
def advance(set_status):
    """Walk an order through the given statuses, asserting each step."""
    def _advance(order_id, *statuses):
        response = None
        for status in statuses:
            response = set_status(order_id, status, trackingNumber="TRK123" if status == "shipped" else None)
            assert response.status_code == 200, response.json()
        return response.json()["data"]["order"] if response else None

    return _advance
