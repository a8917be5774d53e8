"""Admin dashboard aggregation, recomputed on every request"""

from collections import Counter, defaultdict
from typing import Callable, Iterable, Optional, TypeVar

from ..database.categories import category_db
from ..database.orders import order_db
from ..database.products import product_db
from ..database.users import user_db
from ..models.admin import (
    CategoryShare,
    DashboardData,
    MonthBucket,
    OrderCounters,
    OverviewData,
    ProductCounters,
    RevenueCounters,
    TopProduct,
    UserCounters,
)
from ..models.common import utcnow
from ..models.order import Order, OrderStatus
from .order_workflow import month_start, populate_order, revenue

T = TypeVar("T")

RECENT_ORDERS = 5
TOP_PRODUCTS = 5
GROWTH_MONTHS = 12


def top_selling_products(orders: list[Order], limit: int = TOP_PRODUCTS) -> list[TopProduct]:
    """Group line items by product, rank by quantity, join to the live catalog"""
    sold: Counter = Counter()
    earned: dict[str, float] = defaultdict(float)
    for order in orders:
        for item in order.items:
            sold[item.product_id] += item.quantity
            earned[item.product_id] += item.line_total

    top = []
    for product_id, total_sold in sold.most_common(limit):
        product = product_db.get_product(product_id)
        if not product:
            continue
        top.append(
            TopProduct(
                product_id=product.id,
                name=product.name,
                price=product.price,
                images=product.images,
                total_sold=total_sold,
                total_revenue=round(earned[product_id], 2),
            )
        )
    return top


def build_dashboard() -> DashboardData:
    now = utcnow()
    start_of_month = month_start(now)

    users = list(user_db.users.values())
    products = product_db.get_all_products()
    orders = order_db.get_all_orders()
    status_counts = Counter(o.order_status for o in orders)

    recent = sorted(orders, key=lambda o: o.created_at, reverse=True)[:RECENT_ORDERS]

    return DashboardData(
        users=UserCounters(
            total=len(users),
            new_this_month=sum(1 for u in users if u.created_at >= start_of_month),
        ),
        products=ProductCounters(
            total=len(products),
            active=sum(1 for p in products if p.is_active),
            featured=sum(1 for p in products if p.is_featured),
        ),
        orders=OrderCounters(
            total=len(orders),
            pending=status_counts[OrderStatus.PENDING],
            shipped=status_counts[OrderStatus.SHIPPED],
            delivered=status_counts[OrderStatus.DELIVERED],
        ),
        revenue=RevenueCounters(
            total=revenue(orders),
            monthly=revenue(orders, since=start_of_month),
        ),
        recent_orders=[populate_order(o, include_user=True) for o in recent],
        top_selling_products=top_selling_products(orders),
    )


def monthly_buckets(
    records: Iterable[T],
    created_at: Callable[[T], object],
    amount: Optional[Callable[[T], float]] = None,
) -> list[MonthBucket]:
    """Per-month counts (and optional sums), ascending, last GROWTH_MONTHS months with data"""
    counts: Counter = Counter()
    totals: dict[tuple[int, int], float] = defaultdict(float)
    for record in records:
        stamp = created_at(record)
        key = (stamp.year, stamp.month)
        counts[key] += 1
        if amount is not None:
            totals[key] += amount(record)

    keys = sorted(counts)[-GROWTH_MONTHS:]
    return [
        MonthBucket(
            year=year,
            month=month,
            count=counts[(year, month)],
            revenue=round(totals[(year, month)], 2) if amount is not None else None,
        )
        for year, month in keys
    ]


def build_overview() -> OverviewData:
    per_category = Counter(p.category_id for p in product_db.get_all_products())
    distribution = []
    for category_id, count in per_category.most_common():
        category = category_db.get_category(category_id)
        if category:
            distribution.append(CategoryShare(category=category.name, count=count))

    return OverviewData(
        user_growth=monthly_buckets(user_db.users.values(), lambda u: u.created_at),
        order_growth=monthly_buckets(
            order_db.get_all_orders(),
            lambda o: o.created_at,
            amount=lambda o: o.total_amount,
        ),
        category_distribution=distribution,
    )
