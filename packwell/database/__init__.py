# Database modules

from .categories import category_db, CategoryDatabase
from .products import product_db, ProductDatabase, StockRequest
from .carts import cart_db, CartDatabase, wishlist_db, WishlistDatabase
from .orders import order_db, OrderDatabase
from .users import user_db, UserDatabase
from .reviews import review_db, ReviewDatabase
from .contacts import contact_db, ContactDatabase
from .outbox import outbox_db, OutboxDatabase, OutboxMessage, MessageStatus

ALL_DATABASES = (
    category_db,
    product_db,
    cart_db,
    wishlist_db,
    order_db,
    user_db,
    review_db,
    contact_db,
    outbox_db,
)


def reset_all() -> None:
    """Empty every store"""
    for database in ALL_DATABASES:
        database.reset()


__all__ = [
    "category_db",
    "CategoryDatabase",
    "product_db",
    "ProductDatabase",
    "StockRequest",
    "cart_db",
    "CartDatabase",
    "wishlist_db",
    "WishlistDatabase",
    "order_db",
    "OrderDatabase",
    "user_db",
    "UserDatabase",
    "review_db",
    "ReviewDatabase",
    "contact_db",
    "ContactDatabase",
    "outbox_db",
    "OutboxDatabase",
    "OutboxMessage",
    "MessageStatus",
    "reset_all",
]
