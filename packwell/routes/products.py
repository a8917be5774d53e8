"""Product API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..database.categories import category_db
from ..database.products import product_db
from ..errors import NotFoundError
from ..models.common import ApiResponse, paginate
from ..models.product import (
    CategorySummary,
    ProductCreateRequest,
    ProductData,
    ProductDetailData,
    ProductFeaturedRequest,
    ProductListData,
    ProductSort,
    ProductStatusRequest,
)
from ..security.auth_middleware import Principal, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


def _product_fields(request: ProductCreateRequest) -> dict:
    if not category_db.get_category(request.category):
        raise NotFoundError("Category")
    fields = {
        name: getattr(request, name)
        for name in ProductCreateRequest.model_fields
        if name != "category"
    }
    fields["category_id"] = request.category
    return fields


@router.get("", response_model=ApiResponse[ProductListData])
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = Query(None, description="Category ID"),
    search: Optional[str] = Query(None, description="Search query"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    in_stock: bool = Query(False, alias="inStock"),
    featured: bool = Query(False),
    sort: ProductSort = Query(ProductSort.NEWEST),
):
    """
    Search active products.

    Supports filtering by category, price range, stock and featured flag.
    """
    results = product_db.search_products(
        search=search,
        category_id=category,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock,
        featured_only=featured,
        sort=sort,
    )
    products, pagination = paginate(results, page, limit)
    categories = [
        CategorySummary.model_validate(c, from_attributes=True)
        for c in category_db.list_categories(is_active=True)
    ]
    return ApiResponse(
        data=ProductListData(products=products, categories=categories, pagination=pagination)
    )


@router.get("/featured", response_model=ApiResponse[ProductListData])
async def featured_products(limit: int = Query(8, ge=1, le=50)):
    """Get featured products, newest first"""
    products = product_db.search_products(featured_only=True)[:limit]
    return ApiResponse(data=ProductListData(products=products))


@router.get("/{product_id}", response_model=ApiResponse[ProductDetailData])
async def get_product(product_id: str):
    """Get product details with related products from the same category"""
    product = product_db.get_product(product_id)
    if not product:
        raise NotFoundError("Product")
    return ApiResponse(
        data=ProductDetailData(
            product=product,
            related_products=product_db.related_products(product),
        )
    )


@router.post("", status_code=201, response_model=ApiResponse[ProductData])
async def create_product(
    request: ProductCreateRequest,
    admin: Principal = Depends(require_admin),
):
    product = product_db.create_product(**_product_fields(request))
    logger.info(f"Product created: {product.name} ({product.id}) by {admin.user_id}")
    return ApiResponse(message="Product created successfully", data=ProductData(product=product))


@router.put("/{product_id}", response_model=ApiResponse[ProductData])
async def update_product(
    product_id: str,
    request: ProductCreateRequest,
    admin: Principal = Depends(require_admin),
):
    if not product_db.get_product(product_id):
        raise NotFoundError("Product")
    product = product_db.update_product(product_id, **_product_fields(request))
    logger.info(f"Product updated: {product_id} by {admin.user_id}")
    return ApiResponse(message="Product updated successfully", data=ProductData(product=product))


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(product_id: str, admin: Principal = Depends(require_admin)):
    if not product_db.delete_product(product_id):
        raise NotFoundError("Product")
    logger.info(f"Product deleted: {product_id} by {admin.user_id}")
    return ApiResponse(message="Product deleted successfully")


@router.put("/{product_id}/status", response_model=ApiResponse[ProductData])
async def set_product_status(
    product_id: str,
    request: ProductStatusRequest,
    admin: Principal = Depends(require_admin),
):
    product = product_db.update_product(product_id, is_active=request.is_active)
    if not product:
        raise NotFoundError("Product")
    state = "activated" if request.is_active else "deactivated"
    return ApiResponse(message=f"Product {state} successfully", data=ProductData(product=product))


@router.put("/{product_id}/featured", response_model=ApiResponse[ProductData])
async def set_product_featured(
    product_id: str,
    request: ProductFeaturedRequest,
    admin: Principal = Depends(require_admin),
):
    product = product_db.update_product(product_id, is_featured=request.is_featured)
    if not product:
        raise NotFoundError("Product")
    state = "marked as featured" if request.is_featured else "removed from featured"
    return ApiResponse(message=f"Product {state} successfully", data=ProductData(product=product))
