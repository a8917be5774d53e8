"""Review API routes"""

import logging
from collections import Counter
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..database.orders import order_db
from ..database.products import product_db
from ..database.reviews import review_db
from ..database.users import user_db
from ..errors import BusinessRuleError, NotFoundError
from ..models.common import ApiResponse, paginate
from ..models.order import OrderStatus
from ..models.review import (
    ApproveRequest,
    HelpfulData,
    HelpfulRequest,
    ProductReviewListData,
    RatingBucket,
    Review,
    ReviewCreateRequest,
    ReviewData,
    ReviewListData,
    ReviewUpdateRequest,
    ReviewView,
)
from ..security.auth_middleware import Principal, require_admin, require_user
from ..services.ratings import refresh_product_rating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


class ApprovalFilter(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"


def approval_flag(status: Optional[ApprovalFilter]) -> Optional[bool]:
    if status is None:
        return None
    return status == ApprovalFilter.APPROVED


def review_view(review: Review) -> ReviewView:
    """Attach the reviewer, product and order names"""
    user = user_db.get_user(review.user_id)
    product = product_db.get_product(review.product_id)
    order = order_db.get_order(review.order_id)
    return ReviewView(
        **review.model_dump(),
        user_name=user.name if user else None,
        product_name=product.name if product else None,
        order_number=order.order_number if order else None,
    )


def review_page(reviews: list[Review], page: int, limit: int) -> ReviewListData:
    items, pagination = paginate(reviews, page, limit)
    return ReviewListData(reviews=[review_view(r) for r in items], pagination=pagination)


@router.post("", status_code=201, response_model=ApiResponse[ReviewData])
async def create_review(request: ReviewCreateRequest, user: Principal = Depends(require_user)):
    """Review a product from one of the caller's delivered orders"""
    if not product_db.get_product(request.product_id):
        raise NotFoundError("Product")

    order = order_db.get_user_order(request.order_id, user.user_id)
    if not order or order.order_status != OrderStatus.DELIVERED:
        raise NotFoundError("Order", "Order not found or not delivered yet")

    if not any(item.product_id == request.product_id for item in order.items):
        raise BusinessRuleError("Product was not in this order")

    review = review_db.create_review(
        user_id=user.user_id,
        product_id=request.product_id,
        order_id=request.order_id,
        rating=request.rating,
        title=request.title,
        comment=request.comment,
        images=request.images or [],
        is_verified=True,
    )
    if not review:
        raise BusinessRuleError("Review already exists for this product and order")

    refresh_product_rating(review.product_id)
    logger.info(f"Review {review.id} created for product {review.product_id} by {user.user_id}")
    return ApiResponse(message="Review created successfully", data=ReviewData(review=review_view(review)))


@router.get("/product/{product_id}", response_model=ApiResponse[ProductReviewListData])
async def product_reviews(
    product_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    rating: Optional[int] = Query(None, ge=1, le=5),
):
    """Approved reviews for a product with the rating distribution"""
    if not product_db.get_product(product_id):
        raise NotFoundError("Product")

    approved = review_db.list_reviews(product_id=product_id, is_approved=True)
    filtered = [r for r in approved if rating is None or r.rating == rating]
    listing = review_page(filtered, page, limit)

    distribution = Counter(r.rating for r in approved)
    buckets = [
        RatingBucket(rating=value, count=count)
        for value, count in sorted(distribution.items(), reverse=True)
    ]
    return ApiResponse(
        data=ProductReviewListData(
            reviews=listing.reviews,
            pagination=listing.pagination,
            rating_distribution=buckets,
        )
    )


@router.get("/user", response_model=ApiResponse[ReviewListData])
async def my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: Principal = Depends(require_user),
):
    return ApiResponse(data=review_page(review_db.list_reviews(user_id=user.user_id), page, limit))


@router.get("/admin/all", response_model=ApiResponse[ReviewListData])
async def all_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[ApprovalFilter] = None,
    rating: Optional[int] = Query(None, ge=1, le=5),
    admin: Principal = Depends(require_admin),
):
    results = review_db.list_reviews(is_approved=approval_flag(status), rating=rating)
    return ApiResponse(data=review_page(results, page, limit))


@router.put("/{review_id}", response_model=ApiResponse[ReviewData])
async def update_review(
    review_id: str,
    request: ReviewUpdateRequest,
    user: Principal = Depends(require_user),
):
    review = review_db.get_user_review(review_id, user.user_id)
    if not review:
        raise NotFoundError("Review")

    review = review_db.update_review(
        review_id,
        rating=request.rating,
        title=request.title,
        comment=request.comment,
        images=request.images if request.images is not None else review.images,
    )
    refresh_product_rating(review.product_id)
    return ApiResponse(message="Review updated successfully", data=ReviewData(review=review_view(review)))


@router.delete("/{review_id}", response_model=ApiResponse[None])
async def delete_review(review_id: str, user: Principal = Depends(require_user)):
    if not review_db.get_user_review(review_id, user.user_id):
        raise NotFoundError("Review")

    review = review_db.delete_review(review_id)
    if review:
        refresh_product_rating(review.product_id)
    return ApiResponse(message="Review deleted successfully")


@router.post("/{review_id}/helpful", response_model=ApiResponse[HelpfulData])
async def review_feedback(
    review_id: str,
    request: HelpfulRequest,
    user: Principal = Depends(require_user),
):
    review = review_db.record_feedback(review_id, request.is_helpful)
    if not review:
        raise NotFoundError("Review")
    return ApiResponse(
        message="Review feedback recorded",
        data=HelpfulData(helpful=review.helpful, not_helpful=review.not_helpful),
    )


@router.put("/{review_id}/approve", response_model=ApiResponse[ReviewData])
async def approve_review(
    review_id: str,
    request: ApproveRequest,
    admin: Principal = Depends(require_admin),
):
    review = review_db.update_review(review_id, is_approved=request.is_approved)
    if not review:
        raise NotFoundError("Review")

    refresh_product_rating(review.product_id)
    state = "approved" if request.is_approved else "rejected"
    logger.info(f"Review {review_id} {state} by {admin.user_id}")
    return ApiResponse(message=f"Review {state} successfully", data=ReviewData(review=review_view(review)))
