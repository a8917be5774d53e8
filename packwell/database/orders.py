"""Order storage"""

import itertools
import threading
import time
import uuid
from datetime import datetime
from typing import Any, Optional

from ..core.config import settings
from ..models.common import matches_search
from ..models.order import Order, OrderStatus, PaymentStatus


class OrderDatabase:
    """In-memory order storage with a unique order-number index"""

    def __init__(self, prefix: str = "PW"):
        self.prefix = prefix
        self.orders: dict[str, Order] = {}
        self._numbers: dict[str, str] = {}
        self._sequence = itertools.count(int(time.time() * 1000) % 1000)
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.orders.clear()
            self._numbers.clear()

    def _next_order_number(self) -> str:
        """
        Generate an order number that is not in the index.

        Format is PREFIX-<last 8 digits of ms timestamp>-<3 digit sequence>.
        The sequence advances until the candidate is unused, so two orders
        in the same millisecond still get distinct numbers. Must be called
        with the lock held.
        """
        stamp = str(int(time.time() * 1000))[-8:]
        for _ in range(1000):
            candidate = f"{self.prefix}-{stamp}-{next(self._sequence) % 1000:03d}"
            if candidate not in self._numbers:
                return candidate
        # All 1000 suffixes for this millisecond are taken
        time.sleep(0.001)
        return self._next_order_number()

    def create_order(self, **fields: Any) -> Order:
        """Persist a new order, assigning its id and order number"""
        with self._lock:
            order = Order(
                id=str(uuid.uuid4()),
                order_number=self._next_order_number(),
                **fields,
            )
            self.orders[order.id] = order
            self._numbers[order.order_number] = order.id
            return order

    def delete_order(self, order_id: str) -> bool:
        """Remove an order; only used to undo a failed checkout"""
        with self._lock:
            order = self.orders.pop(order_id, None)
            if not order:
                return False
            self._numbers.pop(order.order_number, None)
            return True

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def get_user_order(self, order_id: str, user_id: str) -> Optional[Order]:
        """Get an order only if it belongs to the user"""
        order = self.orders.get(order_id)
        return order if order and order.user_id == user_id else None

    def list_orders(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> list[Order]:
        """Filter orders, newest first"""
        results = list(self.orders.values())

        if user_id:
            results = [o for o in results if o.user_id == user_id]
        if status:
            results = [o for o in results if o.order_status == status]
        if payment_status:
            results = [o for o in results if o.payment_status == payment_status]
        if start_date and end_date:
            results = [o for o in results if start_date <= o.created_at <= end_date]
        if search:
            results = [
                o for o in results
                if matches_search(
                    search,
                    o.order_number,
                    o.shipping_address.name,
                    o.shipping_address.phone,
                )
            ]

        results.sort(key=lambda o: o.created_at, reverse=True)
        return results

    def get_all_orders(self) -> list[Order]:
        return list(self.orders.values())

    def locked(self) -> threading.RLock:
        """Lock to hold across a read-check-write on one order"""
        return self._lock


# Singleton instance
order_db = OrderDatabase(prefix=settings.order_number_prefix)
