"""Category storage"""

import re
import threading
import uuid
from typing import Optional

from ..models.common import matches_search, utcnow
from ..models.product import Category


def slugify(name: str) -> str:
    """Lowercase, hyphen-separated slug for URLs"""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "category"


class CategoryDatabase:
    """In-memory category storage"""

    def __init__(self):
        self.categories: dict[str, Category] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.categories.clear()

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get a category by ID"""
        return self.categories.get(category_id)

    def get_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive lookup by name"""
        wanted = name.strip().lower()
        return next(
            (c for c in self.categories.values() if c.name.lower() == wanted),
            None,
        )

    def list_categories(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[Category]:
        """Filter categories, sorted by name"""
        results = [
            c for c in self.categories.values()
            if matches_search(search, c.name, c.description)
            and (is_active is None or c.is_active == is_active)
        ]
        results.sort(key=lambda c: c.name.lower())
        return results

    def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        image: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Category:
        """Create a category; callers check name uniqueness first"""
        with self._lock:
            category = Category(
                id=category_id or str(uuid.uuid4()),
                name=name,
                slug=slugify(name),
                description=description,
                image=image,
            )
            self.categories[category.id] = category
            return category

    def update_category(
        self,
        category_id: str,
        name: str,
        description: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Optional[Category]:
        with self._lock:
            category = self.get_category(category_id)
            if not category:
                return None
            category.name = name
            category.slug = slugify(name)
            category.description = description
            if image is not None:
                category.image = image
            category.updated_at = utcnow()
            return category

    def set_active(self, category_id: str, is_active: bool) -> Optional[Category]:
        with self._lock:
            category = self.get_category(category_id)
            if not category:
                return None
            category.is_active = is_active
            category.updated_at = utcnow()
            return category

    def delete_category(self, category_id: str) -> bool:
        """Delete a category"""
        with self._lock:
            return self.categories.pop(category_id, None) is not None


# Singleton instance
category_db = CategoryDatabase()
