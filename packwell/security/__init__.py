# Request authentication

from .auth_middleware import (
    AuthDependency,
    AuthenticationMiddleware,
    Principal,
    issue_token,
    optional_user,
    require_admin,
    require_user,
)

__all__ = [
    "AuthDependency",
    "AuthenticationMiddleware",
    "Principal",
    "issue_token",
    "optional_user",
    "require_admin",
    "require_user",
]
