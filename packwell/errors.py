"""Custom exceptions for the store API."""

from typing import Optional


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class NotFoundError(StoreError):
    """Raised when a requested resource doesn't exist."""

    def __init__(self, resource: str, message: Optional[str] = None):
        self.resource = resource
        super().__init__(message or f"{resource} not found")


class BusinessRuleError(StoreError):
    """Raised when a request is well-formed but violates a store rule."""

    pass


class EmptyCartError(BusinessRuleError):
    """Raised when checking out a cart with no items."""

    def __init__(self):
        super().__init__("Cart is empty")


class ProductUnavailableError(BusinessRuleError):
    """Raised when an ordered product is missing or deactivated."""

    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f'Product "{product_name}" is no longer available')


class InsufficientStockError(BusinessRuleError):
    """Raised when a product cannot cover the requested quantity."""

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f'Only {available} items available for "{product_name}"')


class InvalidTransitionError(BusinessRuleError):
    """Raised when an order status change is not in the transition table."""

    def __init__(self, current: str, requested: str, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Cannot change order status from '{current}' to '{requested}'"
        )


class AuthenticationError(StoreError):
    """Raised when a request carries no usable credentials."""

    def __init__(self, message: str = "Access denied. No valid token provided."):
        super().__init__(message)


class PermissionDeniedError(StoreError):
    """Raised when the principal lacks the required role."""

    def __init__(self, message: str = "Access denied. Admin privileges required."):
        super().__init__(message)


class MailDeliveryError(StoreError):
    """Raised by the mail client when the relay rejects a message."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Mail relay returned {status_code}: {detail}")


# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    NotFoundError: 404,
    BusinessRuleError: 400,
    EmptyCartError: 400,
    ProductUnavailableError: 400,
    InsufficientStockError: 400,
    InvalidTransitionError: 400,
    AuthenticationError: 401,
    PermissionDeniedError: 403,
}


def status_code_for(exc: StoreError) -> int:
    """Resolve the HTTP status for an error, falling back along the MRO."""
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[klass]
    return 500
