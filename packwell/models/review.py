"""Review models"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel, Pagination, RequestModel, utcnow
from .product import ProductImage


class Review(CamelModel):
    """Customer review of a delivered product"""
    id: str
    user_id: str
    product_id: str
    order_id: str
    rating: int = Field(ge=1, le=5)
    title: str
    comment: str
    images: list[ProductImage] = []
    is_verified: bool = False
    is_approved: bool = True
    helpful: int = 0
    not_helpful: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ReviewView(Review):
    """Review with display names attached"""
    user_name: Optional[str] = None
    product_name: Optional[str] = None
    order_number: Optional[str] = None


class ReviewContentRequest(RequestModel):
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=5, max_length=100)
    comment: str = Field(min_length=10, max_length=500)
    images: Optional[list[ProductImage]] = None


class ReviewCreateRequest(ReviewContentRequest):
    product_id: str
    order_id: str


class ReviewUpdateRequest(ReviewContentRequest):
    product_id: Optional[str] = None
    order_id: Optional[str] = None


class HelpfulRequest(RequestModel):
    is_helpful: bool


class ApproveRequest(RequestModel):
    is_approved: bool


class RatingBucket(CamelModel):
    rating: int
    count: int


class ReviewData(CamelModel):
    review: ReviewView


class ReviewListData(CamelModel):
    reviews: list[ReviewView]
    pagination: Pagination


class ProductReviewListData(ReviewListData):
    rating_distribution: list[RatingBucket]


class HelpfulData(CamelModel):
    helpful: int
    not_helpful: int
