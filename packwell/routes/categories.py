"""Category API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..database.categories import category_db
from ..database.products import product_db
from ..errors import BusinessRuleError, NotFoundError
from ..models.common import ApiResponse, paginate
from ..models.product import (
    CategoryData,
    CategoryListData,
    CategoryRequest,
    CategoryStatusRequest,
)
from ..security.auth_middleware import Principal, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories"])

DUPLICATE_NAME = "Category with this name already exists"


@router.get("", response_model=ApiResponse[CategoryListData])
async def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
):
    """List active categories by name"""
    results = category_db.list_categories(search=search, is_active=True)
    categories, pagination = paginate(results, page, limit)
    return ApiResponse(data=CategoryListData(categories=categories, pagination=pagination))


@router.get("/{category_id}", response_model=ApiResponse[CategoryData])
async def get_category(category_id: str):
    category = category_db.get_category(category_id)
    if not category:
        raise NotFoundError("Category")
    return ApiResponse(data=CategoryData(category=category))


@router.post("", status_code=201, response_model=ApiResponse[CategoryData])
async def create_category(
    request: CategoryRequest,
    admin: Principal = Depends(require_admin),
):
    if category_db.get_by_name(request.name):
        raise BusinessRuleError(DUPLICATE_NAME)
    category = category_db.create_category(
        name=request.name,
        description=request.description,
        image=request.image,
    )
    logger.info(f"Category created: {category.name} by {admin.user_id}")
    return ApiResponse(message="Category created successfully", data=CategoryData(category=category))


@router.put("/{category_id}", response_model=ApiResponse[CategoryData])
async def update_category(
    category_id: str,
    request: CategoryRequest,
    admin: Principal = Depends(require_admin),
):
    if not category_db.get_category(category_id):
        raise NotFoundError("Category")
    existing = category_db.get_by_name(request.name)
    if existing and existing.id != category_id:
        raise BusinessRuleError(DUPLICATE_NAME)
    category = category_db.update_category(
        category_id,
        name=request.name,
        description=request.description,
        image=request.image,
    )
    return ApiResponse(message="Category updated successfully", data=CategoryData(category=category))


@router.delete("/{category_id}", response_model=ApiResponse[None])
async def delete_category(category_id: str, admin: Principal = Depends(require_admin)):
    if not category_db.get_category(category_id):
        raise NotFoundError("Category")
    product_count = product_db.count_by_category(category_id)
    if product_count:
        raise BusinessRuleError(
            f"Cannot delete category. {product_count} products are associated with this category."
        )
    category_db.delete_category(category_id)
    logger.info(f"Category deleted: {category_id} by {admin.user_id}")
    return ApiResponse(message="Category deleted successfully")


@router.put("/{category_id}/status", response_model=ApiResponse[CategoryData])
async def set_category_status(
    category_id: str,
    request: CategoryStatusRequest,
    admin: Principal = Depends(require_admin),
):
    category = category_db.set_active(category_id, request.is_active)
    if not category:
        raise NotFoundError("Category")
    state = "activated" if request.is_active else "deactivated"
    return ApiResponse(message=f"Category {state} successfully", data=CategoryData(category=category))
