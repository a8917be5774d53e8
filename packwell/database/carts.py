"""Cart and wishlist storage"""

import threading
import uuid
from typing import Optional

from ..errors import BusinessRuleError
from ..models.cart import MAX_LINE_QUANTITY, Cart, CartItem, Wishlist
from ..models.common import utcnow
from ..models.product import Product


class CartDatabase:
    """In-memory cart storage, one cart per user"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.carts.clear()

    def get_cart(self, user_id: str) -> Optional[Cart]:
        """Get a user's cart"""
        return self.carts.get(user_id)

    def get_or_create_cart(self, user_id: str) -> Cart:
        """Get existing cart or create new one"""
        with self._lock:
            cart = self.carts.get(user_id)
            if cart is None:
                cart = Cart(id=str(uuid.uuid4()), user_id=user_id)
                self.carts[user_id] = cart
            return cart

    def add_item(self, user_id: str, product: Product, quantity: int = 1) -> Cart:
        """
        Add an item to the cart, merging with an existing line.

        Raises:
            BusinessRuleError: the merged quantity would exceed the line limit
        """
        with self._lock:
            cart = self.get_or_create_cart(user_id)

            existing_item = next(
                (item for item in cart.items if item.product_id == product.id),
                None,
            )

            if existing_item:
                if existing_item.quantity + quantity > MAX_LINE_QUANTITY:
                    raise BusinessRuleError(f"Quantity cannot exceed {MAX_LINE_QUANTITY}")
                existing_item.quantity += quantity
                existing_item.price = product.price
                existing_item.product_name = product.name
                existing_item.image = product.primary_image
            else:
                cart.items.append(
                    CartItem(
                        product_id=product.id,
                        product_name=product.name,
                        image=product.primary_image,
                        quantity=quantity,
                        price=product.price,
                    )
                )

            self._recalculate_totals(cart)
            return cart

    def update_item_quantity(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
    ) -> Optional[Cart]:
        """Update item quantity in cart; None if the line is missing"""
        with self._lock:
            cart = self.get_cart(user_id)
            if not cart:
                return None

            item = next(
                (item for item in cart.items if item.product_id == product_id),
                None,
            )
            if not item:
                return None

            if quantity <= 0:
                cart.items = [i for i in cart.items if i.product_id != product_id]
            else:
                item.quantity = quantity

            self._recalculate_totals(cart)
            return cart

    def remove_item(self, user_id: str, product_id: str) -> Optional[Cart]:
        """Remove an item from the cart"""
        with self._lock:
            cart = self.get_cart(user_id)
            if not cart:
                return None
            cart.items = [i for i in cart.items if i.product_id != product_id]
            self._recalculate_totals(cart)
            return cart

    def replace_items(self, user_id: str, items: list[CartItem]) -> Optional[Cart]:
        """Overwrite the item list, e.g. after dropping unavailable products"""
        with self._lock:
            cart = self.get_cart(user_id)
            if not cart:
                return None
            cart.items = items
            self._recalculate_totals(cart)
            return cart

    def clear_cart(self, user_id: str) -> Optional[Cart]:
        """Clear all items from cart"""
        return self.replace_items(user_id, [])

    def item_count(self, user_id: str) -> int:
        cart = self.get_cart(user_id)
        return cart.total_items if cart else 0

    def _recalculate_totals(self, cart: Cart) -> None:
        """Recalculate cart totals"""
        cart.total_items = sum(item.quantity for item in cart.items)
        cart.total_price = round(sum(item.line_total for item in cart.items), 2)
        cart.total_discount = 0.0
        cart.updated_at = utcnow()


class WishlistDatabase:
    """In-memory wishlist storage, one list per user"""

    def __init__(self):
        self.wishlists: dict[str, Wishlist] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.wishlists.clear()

    def get_wishlist(self, user_id: str) -> Optional[Wishlist]:
        return self.wishlists.get(user_id)

    def add_product(self, user_id: str, product_id: str) -> Optional[Wishlist]:
        """Add a product; None if it is already listed"""
        with self._lock:
            wishlist = self.wishlists.get(user_id)
            if wishlist is None:
                wishlist = Wishlist(id=str(uuid.uuid4()), user_id=user_id)
                self.wishlists[user_id] = wishlist
            if product_id in wishlist.product_ids:
                return None
            wishlist.product_ids.append(product_id)
            wishlist.updated_at = utcnow()
            return wishlist

    def remove_product(self, user_id: str, product_id: str) -> bool:
        with self._lock:
            wishlist = self.wishlists.get(user_id)
            if not wishlist or product_id not in wishlist.product_ids:
                return False
            wishlist.product_ids.remove(product_id)
            wishlist.updated_at = utcnow()
            return True

    def clear(self, user_id: str) -> Optional[Wishlist]:
        with self._lock:
            wishlist = self.wishlists.get(user_id)
            if wishlist:
                wishlist.product_ids = []
                wishlist.updated_at = utcnow()
            return wishlist


# Singleton instances
cart_db = CartDatabase()
wishlist_db = WishlistDatabase()
