"""
Bearer Token Authentication

Decodes the JWT on incoming requests once, in middleware, and exposes the
caller to route handlers as an immutable Principal through a dependency.
Requests without a token proceed anonymously; requests with a bad token
are rejected.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..core.config import settings
from ..database.users import user_db
from ..errors import AuthenticationError, PermissionDeniedError
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of one request"""
    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def issue_token(user: User, expires_minutes: Optional[int] = None) -> str:
    """Sign a token for a known user; used by the seed script and tests"""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    payload = {
        "sub": user.id,
        "role": user.role.value,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Principal:
    """
    Verify a token and build the principal it names.

    Raises:
        AuthenticationError: the token is expired, malformed or unsigned
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired.") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token.") from e

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError as e:
        raise AuthenticationError("Invalid token.") from e

    return Principal(user_id=str(payload["sub"]), role=role)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Middleware that resolves the request principal.

    If a request has a Bearer token, it is verified and the principal is
    stored on request.state. If verification fails, the request is
    rejected with 401. Without a token the request proceeds anonymously.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.principal = None

        authorization = request.headers.get("Authorization")
        if authorization:
            scheme, _, token = authorization.partition(" ")
            if scheme.lower() != "bearer" or not token.strip():
                return self._reject("Access denied. No valid token provided.")

            try:
                request.state.principal = decode_token(token.strip())
            except AuthenticationError as e:
                logger.warning(f"Token rejected on {request.method} {request.url.path}: {e}")
                return self._reject(str(e))

        return await call_next(request)

    @staticmethod
    def _reject(message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": message},
        )


class AuthDependency:
    """
    FastAPI dependency that hands the request principal to a route.

    The principal is re-checked against the user store so deactivated
    accounts and role changes take effect immediately.
    """

    def __init__(self, require_auth: bool = True, require_admin: bool = False):
        """
        Args:
            require_auth: If True, reject anonymous requests
            require_admin: If True, reject callers without the admin role
        """
        self.require_auth = require_auth
        self.require_admin = require_admin

    async def __call__(self, request: Request) -> Optional[Principal]:
        token_principal: Optional[Principal] = getattr(request.state, "principal", None)

        if token_principal is None:
            if self.require_auth or self.require_admin:
                raise AuthenticationError()
            return None

        user = user_db.get_user(token_principal.user_id)
        if not user or not user.is_active:
            if self.require_auth or self.require_admin:
                raise AuthenticationError("Access denied. User not found or inactive.")
            return None

        principal = Principal(user_id=user.id, role=user.role)

        if self.require_admin and not principal.is_admin:
            raise PermissionDeniedError()

        return principal


# Dependency instances
require_user = AuthDependency(require_auth=True)
require_admin = AuthDependency(require_auth=True, require_admin=True)
optional_user = AuthDependency(require_auth=False)
