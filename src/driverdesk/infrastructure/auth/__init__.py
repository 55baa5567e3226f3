"""Authentication infrastructure components.

Password hashing, JWT access tokens and the identity provider.
"""

from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.auth.jwt_service import (
    AccessTokenClaims,
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
    jwt_service,
)
from driverdesk.infrastructure.auth.password_hasher import hash_password, verify_password

__all__ = [
    "AccessTokenClaims",
    "IdentityProvider",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "TokenExpiredError",
    "hash_password",
    "jwt_service",
    "verify_password",
]
