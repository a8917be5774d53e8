"""Order API routes"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ..database.orders import order_db
from ..errors import NotFoundError
from ..models.common import ApiResponse, paginate
from ..models.order import (
    CancelOrderRequest,
    OrderCreateRequest,
    OrderData,
    OrderListData,
    OrderStats,
    OrderStatus,
    OrderStatusUpdateRequest,
    PaymentStatus,
)
from ..security.auth_middleware import Principal, require_admin, require_user
from ..services.notifications import NotificationDispatcher, get_dispatcher
from ..services.order_workflow import (
    cancel_order,
    order_stats,
    place_order,
    populate_order,
    update_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive query datetimes as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@router.post("", status_code=201, response_model=ApiResponse[OrderData])
async def create_order(
    request: OrderCreateRequest,
    background_tasks: BackgroundTasks,
    user: Principal = Depends(require_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Place an order from the caller's cart.

    Confirmation emails are delivered after the response is sent.
    """
    order = place_order(user.user_id, request)
    background_tasks.add_task(dispatcher.flush)
    return ApiResponse(
        message="Order created successfully",
        data=OrderData(order=populate_order(order)),
    )


@router.get("", response_model=ApiResponse[OrderListData])
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    user: Principal = Depends(require_user),
):
    """The caller's orders, newest first"""
    results = order_db.list_orders(user_id=user.user_id, status=status)
    orders, pagination = paginate(results, page, limit)
    return ApiResponse(
        data=OrderListData(orders=[populate_order(o) for o in orders], pagination=pagination)
    )


# Admin routes are declared before /{order_id} so the literal paths win


@router.get("/admin/all", response_model=ApiResponse[OrderListData])
async def list_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    admin: Principal = Depends(require_admin),
):
    results = order_db.list_orders(
        status=status,
        payment_status=payment_status,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
    )
    orders, pagination = paginate(results, page, limit)
    return ApiResponse(
        data=OrderListData(
            orders=[populate_order(o, include_user=True) for o in orders],
            pagination=pagination,
        )
    )


@router.get("/admin/stats", response_model=ApiResponse[OrderStats])
async def get_order_stats(admin: Principal = Depends(require_admin)):
    return ApiResponse(data=order_stats())


@router.get("/{order_id}", response_model=ApiResponse[OrderData])
async def get_order(order_id: str, user: Principal = Depends(require_user)):
    """Get one of the caller's orders"""
    order = order_db.get_user_order(order_id, user.user_id)
    if not order:
        raise NotFoundError("Order")
    return ApiResponse(data=OrderData(order=populate_order(order)))


@router.put("/{order_id}/cancel", response_model=ApiResponse[OrderData])
async def cancel_my_order(
    order_id: str,
    background_tasks: BackgroundTasks,
    request: Optional[CancelOrderRequest] = None,
    user: Principal = Depends(require_user),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Cancel one of the caller's orders and restore its stock"""
    reason = request.reason if request else None
    order = cancel_order(user.user_id, order_id, reason)
    background_tasks.add_task(dispatcher.flush)
    return ApiResponse(
        message="Order cancelled successfully",
        data=OrderData(order=populate_order(order)),
    )


@router.put("/{order_id}/status", response_model=ApiResponse[OrderData])
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdateRequest,
    background_tasks: BackgroundTasks,
    admin: Principal = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Change an order's status.

    Moves outside the transition table need force=true.
    """
    order = update_status(admin.user_id, order_id, request)
    background_tasks.add_task(dispatcher.flush)
    return ApiResponse(
        message=f"Order status updated to {order.order_status.value}",
        data=OrderData(order=populate_order(order, include_user=True)),
    )
