"""Admin back-office routes: dashboard, statistics and unfiltered listings"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..database.categories import category_db
from ..database.orders import order_db
from ..database.products import product_db
from ..database.reviews import review_db
from ..database.users import user_db
from ..errors import NotFoundError
from ..models.admin import DashboardData, OverviewData
from ..models.common import ApiResponse, paginate
from ..models.order import OrderListData, OrderStatus, PaymentStatus
from ..models.product import CategoryListData, ProductListData
from ..models.review import ReviewListData
from ..models.user import UserData, UserListData, UserRole, UserStatusRequest
from ..security.auth_middleware import require_admin
from ..services.dashboard import build_dashboard, build_overview
from ..services.order_workflow import populate_order
from .orders import as_utc
from .reviews import ApprovalFilter, approval_flag, review_page

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)


class ActiveFilter(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def active_flag(status: Optional[ActiveFilter]) -> Optional[bool]:
    if status is None:
        return None
    return status == ActiveFilter.ACTIVE


@router.get("/dashboard", response_model=ApiResponse[DashboardData])
async def dashboard():
    """Store-wide counters, recent orders and best sellers"""
    return ApiResponse(data=build_dashboard())


@router.get("/stats/overview", response_model=ApiResponse[OverviewData])
async def overview():
    """Monthly growth and category distribution"""
    return ApiResponse(data=build_overview())


@router.get("/users", response_model=ApiResponse[UserListData])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    status: Optional[ActiveFilter] = None,
):
    results = user_db.list_users(search=search, role=role, is_active=active_flag(status))
    users, pagination = paginate(results, page, limit)
    return ApiResponse(data=UserListData(users=users, pagination=pagination))


@router.put("/users/{user_id}/status", response_model=ApiResponse[UserData])
async def set_user_status(user_id: str, request: UserStatusRequest):
    user = user_db.update_user(user_id, is_active=request.is_active)
    if not user:
        raise NotFoundError("User")
    state = "activated" if request.is_active else "deactivated"
    logger.info(f"User {user_id} {state}")
    return ApiResponse(message=f"User {state} successfully", data=UserData(user=user))


@router.get("/products", response_model=ApiResponse[ProductListData])
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[ActiveFilter] = None,
    featured: Optional[bool] = None,
):
    """All products, including inactive ones"""
    results = product_db.search_products(
        search=search,
        category_id=category,
        is_active=active_flag(status),
        sku_search=True,
    )
    if featured is not None:
        results = [p for p in results if p.is_featured == featured]
    products, pagination = paginate(results, page, limit)
    return ApiResponse(data=ProductListData(products=products, pagination=pagination))


@router.get("/categories", response_model=ApiResponse[CategoryListData])
async def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[ActiveFilter] = None,
):
    """All categories, including inactive ones"""
    results = category_db.list_categories(search=search, is_active=active_flag(status))
    categories, pagination = paginate(results, page, limit)
    return ApiResponse(data=CategoryListData(categories=categories, pagination=pagination))


@router.get("/orders", response_model=ApiResponse[OrderListData])
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = None,
):
    results = order_db.list_orders(
        status=status,
        payment_status=payment_status,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
        search=search,
    )
    orders, pagination = paginate(results, page, limit)
    return ApiResponse(
        data=OrderListData(
            orders=[populate_order(o, include_user=True) for o in orders],
            pagination=pagination,
        )
    )


@router.get("/reviews", response_model=ApiResponse[ReviewListData])
async def list_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[ApprovalFilter] = None,
    rating: Optional[int] = Query(None, ge=1, le=5),
    search: Optional[str] = None,
):
    results = review_db.list_reviews(
        is_approved=approval_flag(status),
        rating=rating,
        search=search,
    )
    return ApiResponse(data=review_page(results, page, limit))
