"""Product storage and the demo catalog"""

import threading
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import InsufficientStockError, ProductUnavailableError
from ..models.common import matches_search, utcnow
from ..models.product import Product, ProductImage, ProductSort, Rating
from .categories import category_db

# Demo catalog, loaded when seed_demo_catalog is enabled
DEMO_CATEGORIES: list[dict[str, str]] = [
    {"id": "cat-bottles", "name": "Bottles", "description": "PET and HDPE bottles for liquids"},
    {"id": "cat-containers", "name": "Containers", "description": "Food-grade storage containers"},
    {"id": "cat-jars", "name": "Jars", "description": "Wide-mouth jars for creams and powders"},
    {"id": "cat-closures", "name": "Caps & Closures", "description": "Caps, pumps and sprayers"},
]

DEMO_PRODUCTS: dict[str, Product] = {
    "prod-001": Product(
        id="prod-001",
        name="PET Bottle 500ml",
        description="Crystal-clear PET bottle with 28mm neck. Suitable for water, juices and oils.",
        price=12.0,
        category_id="cat-bottles",
        sku="PW-BTL-PET-500",
        images=[ProductImage(url="/static/images/pet-500.jpg")],
        tags=["pet", "bottle", "beverage"],
        stock=5000,
        is_featured=True,
    ),
    "prod-002": Product(
        id="prod-002",
        name="HDPE Bottle 1 Litre",
        description="Opaque HDPE bottle for chemicals, detergents and lubricants. 38mm neck.",
        price=28.0,
        category_id="cat-bottles",
        sku="PW-BTL-HDPE-1000",
        images=[ProductImage(url="/static/images/hdpe-1000.jpg")],
        tags=["hdpe", "bottle", "chemical"],
        stock=2500,
    ),
    "prod-003": Product(
        id="prod-003",
        name="Round Food Container 750ml",
        description="Microwave-safe PP container with tamper-evident lid. Pack of 25.",
        price=240.0,
        category_id="cat-containers",
        sku="PW-CNT-RND-750",
        images=[ProductImage(url="/static/images/container-750.jpg")],
        tags=["pp", "food", "container"],
        stock=400,
        is_featured=True,
    ),
    "prod-004": Product(
        id="prod-004",
        name="Rectangular Container 1000ml",
        description="Leak-proof rectangular container for takeaway and meal prep. Pack of 25.",
        price=310.0,
        category_id="cat-containers",
        sku="PW-CNT-RCT-1000",
        images=[ProductImage(url="/static/images/container-rect-1000.jpg")],
        tags=["pp", "food", "takeaway"],
        stock=300,
    ),
    "prod-005": Product(
        id="prod-005",
        name="Cosmetic Jar 100g",
        description="Double-wall PP jar with inner disc for creams, balms and gels.",
        price=18.0,
        category_id="cat-jars",
        sku="PW-JAR-COS-100",
        images=[ProductImage(url="/static/images/jar-100.jpg")],
        tags=["jar", "cosmetic"],
        stock=1500,
    ),
    "prod-006": Product(
        id="prod-006",
        name="Wide Mouth Jar 1kg",
        description="HDPE wide-mouth jar for powders, spices and supplements. 89mm cap.",
        price=35.0,
        category_id="cat-jars",
        sku="PW-JAR-WM-1000",
        images=[ProductImage(url="/static/images/jar-1000.jpg")],
        tags=["jar", "hdpe", "powder"],
        stock=900,
    ),
    "prod-007": Product(
        id="prod-007",
        name="Flip Top Cap 28mm",
        description="Polypropylene flip-top cap for PET bottles with 28mm neck finish. Pack of 100.",
        price=150.0,
        category_id="cat-closures",
        sku="PW-CAP-FT-28",
        images=[ProductImage(url="/static/images/cap-28.jpg")],
        tags=["cap", "closure"],
        stock=600,
    ),
    "prod-008": Product(
        id="prod-008",
        name="Trigger Sprayer 28/410",
        description="Chemical-resistant trigger sprayer with adjustable nozzle. Fits 28/410 necks.",
        price=22.0,
        category_id="cat-closures",
        sku="PW-SPR-TRG-28",
        images=[ProductImage(url="/static/images/sprayer.jpg")],
        tags=["sprayer", "closure"],
        stock=800,
    ),
}


@dataclass
class StockRequest:
    """Quantity to reserve for one product; name is used in error messages"""
    product_id: str
    quantity: int
    name: str = ""


SORT_KEYS: dict[ProductSort, tuple[Any, bool]] = {
    ProductSort.PRICE_ASC: (lambda p: p.price, False),
    ProductSort.PRICE_DESC: (lambda p: p.price, True),
    ProductSort.NAME_ASC: (lambda p: p.name.lower(), False),
    ProductSort.NAME_DESC: (lambda p: p.name.lower(), True),
    ProductSort.RATING: (lambda p: p.ratings.average, True),
    ProductSort.NEWEST: (lambda p: p.created_at, True),
    ProductSort.OLDEST: (lambda p: p.created_at, False),
}


class ProductDatabase:
    """In-memory product database"""

    def __init__(self):
        self.products: dict[str, Product] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.products.clear()

    def load_demo_catalog(self) -> int:
        """Load the demo categories and products; returns products added"""
        for entry in DEMO_CATEGORIES:
            if not category_db.get_category(entry["id"]):
                category_db.create_category(
                    name=entry["name"],
                    description=entry["description"],
                    category_id=entry["id"],
                )
        with self._lock:
            added = 0
            for product_id, product in DEMO_PRODUCTS.items():
                if product_id not in self.products:
                    self.products[product_id] = product.model_copy(deep=True)
                    added += 1
            return added

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_active_product(self, product_id: str) -> Optional[Product]:
        """Get a product only if it is on sale"""
        product = self.products.get(product_id)
        return product if product and product.is_active else None

    def get_all_products(self) -> list[Product]:
        """Get all products"""
        return list(self.products.values())

    def search_products(
        self,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock_only: bool = False,
        featured_only: bool = False,
        is_active: Optional[bool] = True,
        sku_search: bool = False,
        sort: ProductSort = ProductSort.NEWEST,
    ) -> list[Product]:
        """
        Search products with filters.

        Returns:
            All matching products in sort order; callers paginate.
        """
        results = list(self.products.values())

        if is_active is not None:
            results = [p for p in results if p.is_active == is_active]

        if category_id:
            results = [p for p in results if p.category_id == category_id]

        if min_price is not None:
            results = [p for p in results if p.price >= min_price]
        if max_price is not None:
            results = [p for p in results if p.price <= max_price]

        if search:
            results = [
                p for p in results
                if matches_search(search, p.name, p.description, *p.tags)
                or (sku_search and matches_search(search, p.sku))
            ]

        if in_stock_only:
            results = [p for p in results if p.in_stock]

        if featured_only:
            results = [p for p in results if p.is_featured]

        key, reverse = SORT_KEYS[sort]
        results.sort(key=key, reverse=reverse)
        return results

    def related_products(self, product: Product, limit: int = 4) -> list[Product]:
        """Other active products in the same category"""
        return [
            p for p in self.products.values()
            if p.category_id == product.category_id and p.id != product.id and p.is_active
        ][:limit]

    def count_by_category(self, category_id: str) -> int:
        return sum(1 for p in self.products.values() if p.category_id == category_id)

    def create_product(self, **fields: Any) -> Product:
        with self._lock:
            product = Product(id=str(uuid.uuid4()), **fields)
            self.products[product.id] = product
            return product

    def update_product(self, product_id: str, **fields: Any) -> Optional[Product]:
        with self._lock:
            product = self.get_product(product_id)
            if not product:
                return None
            for name, value in fields.items():
                setattr(product, name, value)
            product.updated_at = utcnow()
            return product

    def delete_product(self, product_id: str) -> bool:
        with self._lock:
            return self.products.pop(product_id, None) is not None

    def set_rating(self, product_id: str, average: float, count: int) -> bool:
        """Overwrite the stored aggregate rating"""
        with self._lock:
            product = self.get_product(product_id)
            if not product:
                return False
            product.ratings = Rating(average=average, count=count)
            return True

    def reserve_stock(self, requests: list[StockRequest]) -> list[Product]:
        """
        Check and decrement stock for every request as one operation.

        Either every product is decremented or none is. Demand for the same
        product across requests is summed before checking.

        Returns:
            Copies of the reserved products, in request order, taken after
            the decrement.

        Raises:
            ProductUnavailableError: a product is missing or inactive
            InsufficientStockError: a product cannot cover its demand
        """
        with self._lock:
            demand: dict[str, int] = {}
            for req in requests:
                product = self.get_product(req.product_id)
                if not product or not product.is_active:
                    raise ProductUnavailableError(product.name if product else req.name)
                demand[req.product_id] = demand.get(req.product_id, 0) + req.quantity

            for product_id, quantity in demand.items():
                product = self.products[product_id]
                if product.stock < quantity:
                    raise InsufficientStockError(product.name, product.stock)

            for product_id, quantity in demand.items():
                self.products[product_id].stock -= quantity

            return [self.products[req.product_id].model_copy(deep=True) for req in requests]

    def release_stock(self, requests: list[StockRequest]) -> None:
        """Return reserved quantities; products deleted since are skipped"""
        with self._lock:
            for req in requests:
                self.update_stock(req.product_id, req.quantity)

    def update_stock(self, product_id: str, quantity_change: int) -> bool:
        """
        Update product stock.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove

        Returns:
            True if successful
        """
        with self._lock:
            product = self.products.get(product_id)
            if not product:
                return False

            new_quantity = product.stock + quantity_change
            if new_quantity < 0:
                return False

            product.stock = new_quantity
            return True


# Singleton instance
product_db = ProductDatabase()
