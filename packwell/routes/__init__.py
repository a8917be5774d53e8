# API Routes

from .products import router as products_router
from .categories import router as categories_router
from .cart import router as cart_router
from .wishlist import router as wishlist_router
from .orders import router as orders_router
from .reviews import router as reviews_router
from .contact import router as contact_router
from .users import router as users_router
from .admin import router as admin_router

__all__ = [
    "products_router",
    "categories_router",
    "cart_router",
    "wishlist_router",
    "orders_router",
    "reviews_router",
    "contact_router",
    "users_router",
    "admin_router",
]
