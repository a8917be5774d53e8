"""Cart and wishlist models"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel, RequestModel, utcnow
from .product import ProductSummary

MAX_LINE_QUANTITY = 100


class CartItem(CamelModel):
    """Item in a shopping cart"""
    product_id: str
    product_name: str
    image: str = ""
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(CamelModel):
    """Shopping cart, one per user"""
    id: str
    user_id: str
    items: list[CartItem] = []
    total_items: int = 0
    total_price: float = 0.0
    total_discount: float = 0.0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Wishlist(CamelModel):
    """Saved products, one list per user"""
    id: str
    user_id: str
    product_ids: list[str] = []
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AddToCartRequest(RequestModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, ge=1, le=MAX_LINE_QUANTITY)


class UpdateCartItemRequest(RequestModel):
    """Request to update cart item quantity"""
    product_id: str
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)


class ProductRefRequest(RequestModel):
    """Request naming a single product"""
    product_id: str


class CartData(CamelModel):
    cart: Cart


class CountData(CamelModel):
    count: int


class WishlistView(CamelModel):
    id: Optional[str] = None
    products: list[ProductSummary] = []


class WishlistData(CamelModel):
    wishlist: WishlistView
