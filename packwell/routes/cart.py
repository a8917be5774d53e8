"""Cart API routes"""

import logging

from fastapi import APIRouter, Depends

from ..database.carts import cart_db
from ..database.products import product_db
from ..errors import NotFoundError
from ..models.cart import (
    AddToCartRequest,
    CartData,
    CountData,
    ProductRefRequest,
    UpdateCartItemRequest,
)
from ..models.common import ApiResponse
from ..security.auth_middleware import Principal, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["Cart"])

PRODUCT_UNAVAILABLE = "Product not found or not available"


@router.get("", response_model=ApiResponse[CartData])
async def get_cart(user: Principal = Depends(require_user)):
    """Get the caller's cart, refreshed against the live catalog"""
    cart = cart_db.get_or_create_cart(user.user_id)

    live_items = []
    for item in cart.items:
        product = product_db.get_active_product(item.product_id)
        if product:
            live_items.append(
                item.model_copy(update={"product_name": product.name, "image": product.primary_image})
            )

    dropped = len(cart.items) - len(live_items)
    if dropped:
        logger.info(f"Dropped {dropped} unavailable item(s) from cart of {user.user_id}")

    cart = cart_db.replace_items(user.user_id, live_items)
    return ApiResponse(data=CartData(cart=cart))


@router.post("/add", response_model=ApiResponse[CartData])
async def add_to_cart(request: AddToCartRequest, user: Principal = Depends(require_user)):
    """Add an item to the cart"""
    product = product_db.get_active_product(request.product_id)
    if not product:
        raise NotFoundError("Product", PRODUCT_UNAVAILABLE)

    cart = cart_db.add_item(user.user_id, product, request.quantity)
    return ApiResponse(message="Item added to cart successfully", data=CartData(cart=cart))


@router.put("/update", response_model=ApiResponse[CartData])
async def update_cart_item(request: UpdateCartItemRequest, user: Principal = Depends(require_user)):
    """Update item quantity in cart"""
    if not product_db.get_active_product(request.product_id):
        raise NotFoundError("Product", PRODUCT_UNAVAILABLE)

    if not cart_db.get_cart(user.user_id):
        raise NotFoundError("Cart")

    cart = cart_db.update_item_quantity(user.user_id, request.product_id, request.quantity)
    if not cart:
        raise NotFoundError("Item", "Item not found in cart")

    return ApiResponse(message="Cart updated successfully", data=CartData(cart=cart))


@router.delete("/remove", response_model=ApiResponse[CartData])
async def remove_from_cart(request: ProductRefRequest, user: Principal = Depends(require_user)):
    """Remove an item from the cart"""
    cart = cart_db.remove_item(user.user_id, request.product_id)
    if not cart:
        raise NotFoundError("Cart")
    return ApiResponse(message="Item removed from cart successfully", data=CartData(cart=cart))


@router.delete("/clear", response_model=ApiResponse[CartData])
async def clear_cart(user: Principal = Depends(require_user)):
    """Clear all items from cart"""
    cart = cart_db.clear_cart(user.user_id)
    if not cart:
        raise NotFoundError("Cart")
    return ApiResponse(message="Cart cleared successfully", data=CartData(cart=cart))


@router.get("/count", response_model=ApiResponse[CountData])
async def cart_count(user: Principal = Depends(require_user)):
    """Total quantity across cart lines"""
    return ApiResponse(data=CountData(count=cart_db.item_count(user.user_id)))
