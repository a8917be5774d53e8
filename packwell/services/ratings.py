"""Product rating aggregation over approved reviews"""

import logging
import math
from typing import Optional

from ..database.products import product_db
from ..database.reviews import review_db
from ..models.product import Rating

logger = logging.getLogger(__name__)


def compute_rating(ratings: list[int]) -> Rating:
    """Mean rounded half up to one decimal; {0, 0} when there are no ratings"""
    if not ratings:
        return Rating(average=0.0, count=0)
    mean = sum(ratings) / len(ratings)
    return Rating(average=math.floor(mean * 10 + 0.5) / 10, count=len(ratings))


def refresh_product_rating(product_id: str) -> Optional[Rating]:
    """
    Recompute a product's stored rating from its approved reviews.

    Failures are logged and swallowed so the triggering review change
    still succeeds.
    """
    try:
        rating = compute_rating(review_db.approved_ratings(product_id))
        if not product_db.set_rating(product_id, rating.average, rating.count):
            logger.warning(f"Rating refresh skipped, product {product_id} not found")
            return None
        logger.debug(f"Product {product_id} rating is now {rating.average} ({rating.count})")
        return rating
    except Exception:
        logger.exception(f"Failed to refresh rating for product {product_id}")
        return None
