"""Tests for the order status state machine."""

import pytest

from packwell.database import product_db
from packwell.models.order import OrderStatus
from packwell.services.order_state import TRANSITIONS, can_cancel, can_transition, is_terminal


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(OrderStatus)

    def test_terminal_statuses(self):
        assert is_terminal(OrderStatus.COMPLETED)
        assert is_terminal(OrderStatus.CANCELLED)
        assert not is_terminal(OrderStatus.SHIPPED)

    @pytest.mark.parametrize("status", ["pending", "confirmed", "processing"])
    def test_cancellable_before_shipping(self, status):
        assert can_cancel(OrderStatus(status))

    @pytest.mark.parametrize("status", ["shipped", "delivered", "completed", "cancelled"])
    def test_not_cancellable_after_shipping(self, status):
        assert not can_cancel(OrderStatus(status))

    def test_happy_path_is_allowed(self):
        path = ["pending", "confirmed", "processing", "shipped", "delivered", "completed"]
        for current, following in zip(path, path[1:]):
            assert can_transition(OrderStatus(current), OrderStatus(following))

    def test_no_going_back(self):
        assert not can_transition(OrderStatus.SHIPPED, OrderStatus.PENDING)


class TestCustomerCancel:
    @pytest.mark.parametrize(
        "steps",
        [[], ["confirmed"], ["confirmed", "processing"]],
        ids=["pending", "confirmed", "processing"],
    )
    def test_cancel_restores_stock(self, client, customer_headers, product_a, placed_order, advance, steps):
        advance(placed_order["id"], *steps)
        assert product_db.get_product(product_a.id).stock == 8

        response = client.put(
            f"/api/orders/{placed_order['id']}/cancel",
            json={"reason": "Ordered the wrong size"},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Order cancelled successfully"
        order = response.json()["data"]["order"]
        assert order["orderStatus"] == "cancelled"
        assert order["cancelledAt"] is not None
        assert order["cancellationReason"] == "Ordered the wrong size"
        assert product_db.get_product(product_a.id).stock == 10

    def test_default_reason(self, client, customer_headers, placed_order):
        response = client.put(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["order"]["cancellationReason"] == "Cancelled by customer"

    @pytest.mark.parametrize(
        "steps",
        [
            ["confirmed", "processing", "shipped"],
            ["confirmed", "processing", "shipped", "delivered"],
        ],
        ids=["shipped", "delivered"],
    )
    def test_cannot_cancel_after_shipping(self, client, customer_headers, product_a, placed_order, advance, steps):
        advance(placed_order["id"], *steps)

        response = client.put(f"/api/orders/{placed_order['id']}/cancel", headers=customer_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Order cannot be cancelled at this stage"
        assert product_db.get_product(product_a.id).stock == 8

    def test_cancel_twice_restores_stock_once(self, client, customer_headers, product_a, placed_order):
        url = f"/api/orders/{placed_order['id']}/cancel"
        assert client.put(url, headers=customer_headers).status_code == 200

        response = client.put(url, headers=customer_headers)
        assert response.status_code == 400
        assert product_db.get_product(product_a.id).stock == 10

    def test_cannot_cancel_someone_elses_order(self, client, other_headers, product_a, placed_order):
        response = client.put(f"/api/orders/{placed_order['id']}/cancel", headers=other_headers)
        assert response.status_code == 404
        assert product_db.get_product(product_a.id).stock == 8


class TestAdminStatusUpdate:
    def test_follows_table(self, placed_order, advance):
        order = advance(placed_order["id"], "confirmed", "processing")
        assert order["orderStatus"] == "processing"
        assert [h["status"] for h in order["statusHistory"]] == ["pending", "confirmed", "processing"]
        assert not any(h["override"] for h in order["statusHistory"])

    def test_rejects_skipping_ahead(self, set_status, placed_order):
        response = set_status(placed_order["id"], "shipped")
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot change order status from 'pending' to 'shipped'"

    def test_rejects_moving_backwards(self, set_status, placed_order, advance):
        advance(placed_order["id"], "confirmed", "processing", "shipped")

        response = set_status(placed_order["id"], "pending")
        assert response.status_code == 400

    def test_force_records_override(self, set_status, placed_order):
        response = set_status(placed_order["id"], "shipped", force=True, trackingNumber="AWB-991")
        assert response.status_code == 200
        order = response.json()["data"]["order"]
        assert order["orderStatus"] == "shipped"
        assert order["trackingNumber"] == "AWB-991"
        assert order["shippedAt"] is not None
        assert order["statusHistory"][-1]["override"] is True

    def test_cancelling_shipped_order_needs_force(self, set_status, product_a, placed_order, advance):
        advance(placed_order["id"], "confirmed", "processing", "shipped")

        assert set_status(placed_order["id"], "cancelled").status_code == 400
        assert product_db.get_product(product_a.id).stock == 8

        response = set_status(placed_order["id"], "cancelled", force=True)
        assert response.status_code == 200
        order = response.json()["data"]["order"]
        assert order["orderStatus"] == "cancelled"
        assert order["cancellationReason"] == "Cancelled by admin"
        assert product_db.get_product(product_a.id).stock == 10

    def test_admin_cancel_with_reason(self, set_status, product_a, placed_order):
        response = set_status(placed_order["id"], "cancelled", cancellationReason="Address unreachable")
        assert response.status_code == 200
        assert response.json()["data"]["order"]["cancellationReason"] == "Address unreachable"
        assert product_db.get_product(product_a.id).stock == 10

    @pytest.mark.parametrize("target", ["pending", "confirmed", "processing"])
    def test_terminal_orders_never_change(self, set_status, product_a, placed_order, target):
        assert set_status(placed_order["id"], "cancelled").status_code == 200

        response = set_status(placed_order["id"], target, force=True)
        assert response.status_code == 400
        assert product_db.get_product(product_a.id).stock == 10

    def test_completed_is_terminal(self, set_status, placed_order, advance):
        order = advance(placed_order["id"], "confirmed", "processing", "shipped", "delivered", "completed")
        assert order["completedAt"] is not None

        response = set_status(placed_order["id"], "cancelled", force=True)
        assert response.status_code == 400

    def test_entry_timestamps(self, placed_order, advance):
        order = advance(placed_order["id"], "confirmed", "processing", "shipped")
        assert order["shippedAt"] is not None
        assert order["trackingNumber"] == "TRK123"
        assert order["deliveredAt"] is None

        order = advance(placed_order["id"], "delivered")
        assert order["deliveredAt"] is not None

    def test_same_status_is_noop(self, set_status, placed_order, advance):
        advance(placed_order["id"], "confirmed")

        response = set_status(placed_order["id"], "confirmed")
        assert response.status_code == 200
        assert len(response.json()["data"]["order"]["statusHistory"]) == 2

    def test_resending_shipped_updates_tracking(self, set_status, placed_order, advance):
        advance(placed_order["id"], "confirmed", "processing", "shipped")

        response = set_status(placed_order["id"], "shipped", trackingNumber="TRK999")
        assert response.status_code == 200
        order = response.json()["data"]["order"]
        assert order["trackingNumber"] == "TRK999"
        assert len(order["statusHistory"]) == 4

    def test_rejects_unknown_status(self, set_status, placed_order):
        response = set_status(placed_order["id"], "lost")
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "orderStatus"

    def test_missing_order(self, set_status, admin_headers):
        response = set_status("no-such-order", "confirmed")
        assert response.status_code == 404

    def test_requires_admin(self, client, customer_headers, placed_order):
        response = client.put(
            f"/api/orders/{placed_order['id']}/status",
            json={"orderStatus": "confirmed"},
            headers=customer_headers,
        )
        assert response.status_code == 403

    def test_response_includes_customer(self, set_status, customer, placed_order):
        response = set_status(placed_order["id"], "confirmed")
        assert response.json()["data"]["order"]["user"]["name"] == customer.name
