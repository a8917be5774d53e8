"""
Packwell Store API

Storefront backend for a plastics packaging manufacturer: catalog, cart,
wishlist, checkout and order tracking, reviews, contact form and the admin
back-office.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.seed import ensure_admin
from .database.products import product_db
from .errors import StoreError, status_code_for
from .routes import (
    admin_router,
    cart_router,
    categories_router,
    contact_router,
    orders_router,
    products_router,
    reviews_router,
    users_router,
    wishlist_router,
)
from .security.auth_middleware import AuthenticationMiddleware
from .services.notifications import close_dispatcher

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"{settings.app_name} starting up ({settings.environment})...")
    if settings.seed_demo_catalog:
        added = product_db.load_demo_catalog()
        logger.info(f"Demo catalog loaded: {added} products")
    if settings.seed_admin:
        ensure_admin(settings.admin_email, settings.admin_name)
    if not settings.mail_configured:
        logger.warning("Mail relay not configured - emails will be skipped")
    yield
    await close_dispatcher()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Storefront and order workflow API for plastic packaging products",
    version="1.0.0",
    lifespan=lifespan,
)

# Bearer token middleware
app.add_middleware(AuthenticationMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(cart_router)
app.include_router(wishlist_router)
app.include_router(orders_router)
app.include_router(reviews_router)
app.include_router(contact_router)
app.include_router(users_router)
app.include_router(admin_router)


# ==================== Error envelopes ====================

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path")),
            "message": error["msg"],
            "value": error.get("input"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            {"success": False, "message": "Validation failed", "errors": errors}
        ),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Something went wrong",
            "error": str(exc) if settings.is_development else "Internal server error",
        },
    )


@app.get("/")
async def index():
    """API index"""
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "categories": "/api/categories",
            "cart": "/api/cart",
            "wishlist": "/api/wishlist",
            "orders": "/api/orders",
            "reviews": "/api/reviews",
            "contact": "/api/contact",
            "users": "/api/users",
            "admin": "/api/admin",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "packwell-store"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "packwell.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
