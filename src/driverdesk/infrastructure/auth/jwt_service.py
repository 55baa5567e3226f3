"""Access tokens for administrators and drivers.

Tokens are HS256 JWTs issued by ``driverdesk``. Only one kind exists: a
short-lived access token naming the identity (``sub``) and its email.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from driverdesk.core.config import get_settings

REQUIRED_CLAIMS = ["iss", "sub", "iat", "exp", "type"]


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    pass


class InvalidTokenError(JWTError):
    pass


@dataclass(frozen=True)
class AccessTokenClaims:
    """Verified claims of an access token."""

    user_id: str
    email: str | None
    issued_at: datetime
    expires_at: datetime


class JWTService:
    """Signs and verifies access tokens."""

    ALGORITHM = "HS256"
    ISSUER = "driverdesk"
    TOKEN_TYPE = "access"

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Signing key. Falls back to ``settings.secret_key``,
                read on each use so tests can swap settings.
        """
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str:
        return self._secret_key or get_settings().secret_key

    def get_expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return get_settings().access_token_expire_minutes * 60

    def create_access_token(
        self,
        user_id: str,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Sign an access token for an identity.

        Args:
            user_id: Identity ID, stored as ``sub``.
            email: Login email.
            expires_delta: Lifetime; defaults to ``access_token_expire_minutes``.
        """
        issued_at = datetime.now(timezone.utc)
        lifetime = expires_delta or timedelta(seconds=self.get_expires_in())
        return jwt.encode(
            {
                "iss": self.ISSUER,
                "sub": user_id,
                "email": email,
                "type": self.TOKEN_TYPE,
                "iat": issued_at,
                "exp": issued_at + lifetime,
            },
            self.secret_key,
            algorithm=self.ALGORITHM,
        )

    def decode_token(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer and expiry and return the raw payload.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: For any other verification failure.
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

    def validate_access_token(self, token: str) -> AccessTokenClaims:
        """Decode a token and require it to be an access token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If it does not verify or is another type.
        """
        payload = self.decode_token(token)
        if payload["type"] != self.TOKEN_TYPE or not payload["sub"]:
            raise InvalidTokenError("Not an access token")
        return AccessTokenClaims(
            user_id=payload["sub"],
            email=payload.get("email"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


jwt_service = JWTService()
