# Store Models

from .common import ApiResponse, CamelModel, Pagination, RequestModel, paginate
from .user import Address, User, UserRole, UserSummary
from .product import Category, CategorySummary, Product, ProductImage, ProductSummary, Rating
from .cart import Cart, CartItem, Wishlist
from .order import (
    Order,
    OrderDetail,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ShippingAddress,
    StatusChange,
)
from .review import Review, ReviewView
from .contact import Contact, ContactStatus, ContactSubject

__all__ = [
    "ApiResponse",
    "CamelModel",
    "Pagination",
    "RequestModel",
    "paginate",
    "Address",
    "User",
    "UserRole",
    "UserSummary",
    "Category",
    "CategorySummary",
    "Product",
    "ProductImage",
    "ProductSummary",
    "Rating",
    "Cart",
    "CartItem",
    "Wishlist",
    "Order",
    "OrderDetail",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "ShippingAddress",
    "StatusChange",
    "Review",
    "ReviewView",
    "Contact",
    "ContactStatus",
    "ContactSubject",
]
