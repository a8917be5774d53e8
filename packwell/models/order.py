"""Order models"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from .common import CamelModel, Pagination, RequestModel, utcnow
from .product import ProductSummary
from .user import AddressRequest, UserSummary


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"


class ShippingAddress(CamelModel):
    """Shipping address embedded in the order"""
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


class OrderItem(CamelModel):
    """Line item snapshot taken at checkout"""
    product_id: str
    name: str
    price: float
    quantity: int = Field(ge=1)
    image: str = ""

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class StatusChange(CamelModel):
    """One entry of an order's status history"""
    status: OrderStatus
    at: datetime = Field(default_factory=utcnow)
    by: Optional[str] = None
    override: bool = False


class Order(CamelModel):
    """Placed order"""
    id: str
    order_number: str
    user_id: str
    items: list[OrderItem]
    shipping_address: ShippingAddress
    order_status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.COD
    subtotal: float
    shipping_charges: float = 0.0
    discount: float = 0.0
    total_amount: float
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    status_history: list[StatusChange] = []
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class OrderItemDetail(OrderItem):
    """Line item with the live product attached"""
    product: Optional[ProductSummary] = None


class OrderDetail(Order):
    """Order as returned by the API"""
    items: list[OrderItemDetail]
    user: Optional[UserSummary] = None


class OrderCreateRequest(RequestModel):
    """Checkout request; line items always come from the stored cart"""
    shipping_address: AddressRequest
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: Optional[str] = Field(default=None, max_length=500)
    items: Optional[list[dict[str, Any]]] = None


class CancelOrderRequest(RequestModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class OrderStatusUpdateRequest(RequestModel):
    """Admin status change"""
    order_status: OrderStatus
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)
    force: bool = False


class OrderData(CamelModel):
    order: OrderDetail


class OrderListData(CamelModel):
    orders: list[OrderDetail]
    pagination: Pagination


class StatusCount(CamelModel):
    status: OrderStatus
    count: int


class OrderStats(CamelModel):
    total_orders: int
    orders_by_status: list[StatusCount]
    monthly_orders: int
    yearly_orders: int
    total_revenue: float
    monthly_revenue: float
