"""Wishlist API routes"""

import logging

from fastapi import APIRouter, Depends

from ..database.carts import cart_db, wishlist_db
from ..database.products import product_db
from ..errors import BusinessRuleError, NotFoundError
from ..models.cart import CartData, CountData, ProductRefRequest, WishlistData, WishlistView
from ..models.common import ApiResponse
from ..models.product import ProductSummary
from ..security.auth_middleware import Principal, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])


def _view(user_id: str) -> WishlistView:
    """Wishlist with active product summaries, in the order they were added"""
    wishlist = wishlist_db.get_wishlist(user_id)
    if not wishlist:
        return WishlistView()
    products = []
    for product_id in wishlist.product_ids:
        product = product_db.get_active_product(product_id)
        if product:
            products.append(ProductSummary.of(product))
    return WishlistView(id=wishlist.id, products=products)


@router.get("", response_model=ApiResponse[WishlistData])
async def get_wishlist(user: Principal = Depends(require_user)):
    return ApiResponse(data=WishlistData(wishlist=_view(user.user_id)))


@router.post("/add", response_model=ApiResponse[WishlistData])
async def add_to_wishlist(request: ProductRefRequest, user: Principal = Depends(require_user)):
    if not product_db.get_active_product(request.product_id):
        raise NotFoundError("Product", "Product not found or not available")

    if not wishlist_db.add_product(user.user_id, request.product_id):
        raise BusinessRuleError("Product already in wishlist")

    return ApiResponse(
        message="Product added to wishlist successfully",
        data=WishlistData(wishlist=_view(user.user_id)),
    )


@router.delete("/remove", response_model=ApiResponse[WishlistData])
async def remove_from_wishlist(request: ProductRefRequest, user: Principal = Depends(require_user)):
    if not wishlist_db.remove_product(user.user_id, request.product_id):
        raise NotFoundError("Product", "Product not found in wishlist")

    return ApiResponse(
        message="Product removed from wishlist successfully",
        data=WishlistData(wishlist=_view(user.user_id)),
    )


@router.delete("/clear", response_model=ApiResponse[WishlistData])
async def clear_wishlist(user: Principal = Depends(require_user)):
    if not wishlist_db.clear(user.user_id):
        raise NotFoundError("Wishlist")
    return ApiResponse(
        message="Wishlist cleared successfully",
        data=WishlistData(wishlist=_view(user.user_id)),
    )


@router.get("/count", response_model=ApiResponse[CountData])
async def wishlist_count(user: Principal = Depends(require_user)):
    wishlist = wishlist_db.get_wishlist(user.user_id)
    return ApiResponse(data=CountData(count=len(wishlist.product_ids) if wishlist else 0))


@router.post("/move-to-cart", response_model=ApiResponse[CartData])
async def move_to_cart(request: ProductRefRequest, user: Principal = Depends(require_user)):
    """Add one unit to the cart and drop the product from the wishlist"""
    wishlist = wishlist_db.get_wishlist(user.user_id)
    if not wishlist or request.product_id not in wishlist.product_ids:
        raise NotFoundError("Product", "Product not found in wishlist")

    product = product_db.get_active_product(request.product_id)
    if not product:
        raise NotFoundError("Product", "Product not found or not available")

    cart = cart_db.add_item(user.user_id, product, 1)
    wishlist_db.remove_product(user.user_id, request.product_id)
    logger.debug(f"Moved {product.id} from wishlist to cart for {user.user_id}")

    return ApiResponse(message="Product moved to cart successfully", data=CartData(cart=cart))
