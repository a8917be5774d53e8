"""Admin dashboard models"""

from typing import Optional

from .common import CamelModel
from .order import OrderDetail
from .product import ProductImage


class UserCounters(CamelModel):
    total: int
    new_this_month: int


class ProductCounters(CamelModel):
    total: int
    active: int
    featured: int


class OrderCounters(CamelModel):
    total: int
    pending: int
    shipped: int
    delivered: int


class RevenueCounters(CamelModel):
    total: float
    monthly: float


class TopProduct(CamelModel):
    """Best seller: line items grouped by product, joined to the catalog"""
    product_id: str
    name: str
    price: float
    images: list[ProductImage] = []
    total_sold: int
    total_revenue: float


class DashboardData(CamelModel):
    users: UserCounters
    products: ProductCounters
    orders: OrderCounters
    revenue: RevenueCounters
    recent_orders: list[OrderDetail]
    top_selling_products: list[TopProduct]


class MonthBucket(CamelModel):
    year: int
    month: int
    count: int
    revenue: Optional[float] = None


class CategoryShare(CamelModel):
    category: str
    count: int


class OverviewData(CamelModel):
    user_growth: list[MonthBucket]
    order_growth: list[MonthBucket]
    category_distribution: list[CategoryShare]
