"""
Order Workflow

Checkout from the stored cart, the order status state machine, and the
read-side helpers that attach live product and customer data to orders.
"""

import logging
from datetime import datetime
from typing import Optional

from ..core.config import settings
from ..database.carts import cart_db
from ..database.orders import order_db
from ..database.products import StockRequest, product_db
from ..database.users import user_db
from ..errors import EmptyCartError, InvalidTransitionError, NotFoundError
from ..models.common import utcnow
from ..models.order import (
    Order,
    OrderCreateRequest,
    OrderDetail,
    OrderItem,
    OrderItemDetail,
    OrderStats,
    OrderStatus,
    OrderStatusUpdateRequest,
    ShippingAddress,
    StatusChange,
    StatusCount,
)
from ..models.product import ProductSummary
from ..models.user import UserSummary
from .notifications import notify_order_placed, notify_status_change
from .order_state import can_cancel, can_transition, is_terminal

logger = logging.getLogger(__name__)

REVENUE_STATUSES = (OrderStatus.SHIPPED, OrderStatus.DELIVERED)


def calculate_shipping(subtotal: float) -> float:
    """Free shipping at or above the threshold, flat fee below it"""
    if subtotal >= settings.free_shipping_threshold:
        return 0.0
    return settings.flat_shipping_fee


def _stock_requests(order: Order) -> list[StockRequest]:
    return [StockRequest(item.product_id, item.quantity, item.name) for item in order.items]


# ==================== Checkout ====================

def place_order(user_id: str, request: OrderCreateRequest) -> Order:
    """
    Turn the user's cart into an order.

    Stock for every line is reserved in one step, priced at the current
    product price, and released again if persisting the order or clearing
    the cart fails.

    Raises:
        EmptyCartError: the cart is missing or has no items
        ProductUnavailableError: a product is missing or inactive
        InsufficientStockError: a product cannot cover its quantity
    """
    cart = cart_db.get_cart(user_id)
    if not cart or not cart.items:
        raise EmptyCartError()

    requests = [
        StockRequest(item.product_id, item.quantity, item.product_name)
        for item in cart.items
    ]
    reserved = product_db.reserve_stock(requests)

    order: Optional[Order] = None
    try:
        items = [
            OrderItem(
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=req.quantity,
                image=product.primary_image,
            )
            for product, req in zip(reserved, requests)
        ]
        subtotal = round(sum(item.line_total for item in items), 2)
        shipping_charges = calculate_shipping(subtotal)
        discount = 0.0

        order = order_db.create_order(
            user_id=user_id,
            items=items,
            shipping_address=ShippingAddress(**request.shipping_address.model_dump()),
            payment_method=request.payment_method,
            subtotal=subtotal,
            shipping_charges=shipping_charges,
            discount=discount,
            total_amount=round(subtotal + shipping_charges - discount, 2),
            notes=request.notes,
            status_history=[StatusChange(status=OrderStatus.PENDING, by=user_id)],
        )
        cart_db.clear_cart(user_id)
    except Exception:
        logger.error(f"Order placement failed for user {user_id}, releasing reserved stock")
        product_db.release_stock(requests)
        if order is not None:
            order_db.delete_order(order.id)
        raise

    logger.info(
        f"Order placed: {order.order_number} by {user_id}, "
        f"{len(order.items)} line(s), total {order.total_amount}"
    )
    notify_order_placed(order)
    return order


# ==================== State machine ====================

def _enter_status(
    order: Order,
    status: OrderStatus,
    by: str,
    override: bool = False,
    tracking_number: Optional[str] = None,
    reason: Optional[str] = None,
) -> None:
    """Move an order to a new status and apply that status's side effects"""
    now = utcnow()
    order.order_status = status

    if status == OrderStatus.SHIPPED:
        order.shipped_at = now
        if tracking_number:
            order.tracking_number = tracking_number
    elif status == OrderStatus.DELIVERED:
        order.delivered_at = now
    elif status == OrderStatus.COMPLETED:
        order.completed_at = now
    elif status == OrderStatus.CANCELLED:
        order.cancelled_at = now
        order.cancellation_reason = reason
        product_db.release_stock(_stock_requests(order))

    order.status_history.append(StatusChange(status=status, at=now, by=by, override=override))
    order.updated_at = now


def cancel_order(user_id: str, order_id: str, reason: Optional[str] = None) -> Order:
    """Customer cancellation of their own order"""
    with order_db.locked():
        order = order_db.get_user_order(order_id, user_id)
        if not order:
            raise NotFoundError("Order")

        if not can_cancel(order.order_status):
            raise InvalidTransitionError(
                order.order_status.value,
                OrderStatus.CANCELLED.value,
                "Order cannot be cancelled at this stage",
            )

        _enter_status(
            order,
            OrderStatus.CANCELLED,
            by=user_id,
            reason=reason or "Cancelled by customer",
        )

    logger.info(f"Order {order.order_number} cancelled by customer {user_id}")
    notify_status_change(order)
    return order


def update_status(admin_id: str, order_id: str, request: OrderStatusUpdateRequest) -> Order:
    """
    Admin status change.

    Transitions outside the table need force=True and are recorded as
    overrides. Terminal orders never change.
    """
    requested = request.order_status

    with order_db.locked():
        order = order_db.get_order(order_id)
        if not order:
            raise NotFoundError("Order")
        current = order.order_status

        if requested == current:
            if requested == OrderStatus.SHIPPED and request.tracking_number:
                order.tracking_number = request.tracking_number
                order.updated_at = utcnow()
                logger.info(f"Tracking number for {order.order_number} set to {request.tracking_number}")
                notify_status_change(order)
            return order

        if is_terminal(current):
            logger.warning(
                f"Rejected status change on {order.order_number}: "
                f"{current.value} is terminal"
            )
            raise InvalidTransitionError(
                current.value,
                requested.value,
                f"Order is {current.value} and can no longer change status",
            )

        override = False
        if not can_transition(current, requested):
            if not request.force:
                logger.warning(
                    f"Rejected status change on {order.order_number}: "
                    f"{current.value} -> {requested.value}"
                )
                raise InvalidTransitionError(current.value, requested.value)
            override = True
            logger.warning(
                f"Admin {admin_id} forced {order.order_number} "
                f"from {current.value} to {requested.value}"
            )

        _enter_status(
            order,
            requested,
            by=admin_id,
            override=override,
            tracking_number=request.tracking_number,
            reason=request.cancellation_reason or "Cancelled by admin",
        )

    logger.info(f"Order {order.order_number} status: {current.value} -> {requested.value}")
    notify_status_change(order)
    return order


# ==================== Read side ====================

def user_summary(user_id: str) -> Optional[UserSummary]:
    user = user_db.get_user(user_id)
    return UserSummary.model_validate(user, from_attributes=True) if user else None


def populate_order(order: Order, include_user: bool = False) -> OrderDetail:
    """Attach live product summaries, and optionally the customer, to an order"""
    items = []
    for item in order.items:
        product = product_db.get_product(item.product_id)
        items.append(
            OrderItemDetail(
                **item.model_dump(),
                product=ProductSummary.of(product) if product else None,
            )
        )
    return OrderDetail(
        **order.model_dump(exclude={"items"}),
        items=items,
        user=user_summary(order.user_id) if include_user else None,
    )


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def revenue(orders: list[Order], since: Optional[datetime] = None) -> float:
    """Total of shipped and delivered orders, optionally from a date on"""
    return round(
        sum(
            o.total_amount for o in orders
            if o.order_status in REVENUE_STATUSES and (since is None or o.created_at >= since)
        ),
        2,
    )


def order_stats() -> OrderStats:
    orders = order_db.get_all_orders()
    now = utcnow()
    start_of_month = month_start(now)
    start_of_year = start_of_month.replace(month=1)

    by_status = [
        StatusCount(status=status, count=sum(1 for o in orders if o.order_status == status))
        for status in OrderStatus
    ]

    return OrderStats(
        total_orders=len(orders),
        orders_by_status=[entry for entry in by_status if entry.count],
        monthly_orders=sum(1 for o in orders if o.created_at >= start_of_month),
        yearly_orders=sum(1 for o in orders if o.created_at >= start_of_year),
        total_revenue=revenue(orders),
        monthly_revenue=revenue(orders, since=start_of_month),
    )
