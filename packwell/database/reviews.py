"""Review storage"""

import threading
import uuid
from typing import Any, Optional

from ..models.common import matches_search, utcnow
from ..models.review import Review


class ReviewDatabase:
    """In-memory review storage, unique per (user, product, order)"""

    def __init__(self):
        self.reviews: dict[str, Review] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.reviews.clear()

    def get_review(self, review_id: str) -> Optional[Review]:
        return self.reviews.get(review_id)

    def get_user_review(self, review_id: str, user_id: str) -> Optional[Review]:
        review = self.reviews.get(review_id)
        return review if review and review.user_id == user_id else None

    def create_review(self, **fields: Any) -> Optional[Review]:
        """Create a review; None if one exists for the same user, product and order"""
        with self._lock:
            key = (fields["user_id"], fields["product_id"], fields["order_id"])
            if any(
                (r.user_id, r.product_id, r.order_id) == key
                for r in self.reviews.values()
            ):
                return None
            review = Review(id=str(uuid.uuid4()), **fields)
            self.reviews[review.id] = review
            return review

    def update_review(self, review_id: str, **fields: Any) -> Optional[Review]:
        with self._lock:
            review = self.get_review(review_id)
            if not review:
                return None
            for name, value in fields.items():
                setattr(review, name, value)
            review.updated_at = utcnow()
            return review

    def delete_review(self, review_id: str) -> Optional[Review]:
        with self._lock:
            return self.reviews.pop(review_id, None)

    def record_feedback(self, review_id: str, is_helpful: bool) -> Optional[Review]:
        with self._lock:
            review = self.get_review(review_id)
            if not review:
                return None
            if is_helpful:
                review.helpful += 1
            else:
                review.not_helpful += 1
            return review

    def list_reviews(
        self,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
        is_approved: Optional[bool] = None,
        rating: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[Review]:
        """Filter reviews, newest first"""
        results = [
            r for r in self.reviews.values()
            if (product_id is None or r.product_id == product_id)
            and (user_id is None or r.user_id == user_id)
            and (is_approved is None or r.is_approved == is_approved)
            and (rating is None or r.rating == rating)
            and matches_search(search, r.title, r.comment)
        ]
        results.sort(key=lambda r: r.created_at, reverse=True)
        return results

    def approved_ratings(self, product_id: str) -> list[int]:
        """Ratings of every approved review for a product"""
        return [
            r.rating for r in self.reviews.values()
            if r.product_id == product_id and r.is_approved
        ]


# Singleton instance
review_db = ReviewDatabase()
