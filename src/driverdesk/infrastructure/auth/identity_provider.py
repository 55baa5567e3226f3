"""Identity provider backed by the users table.

Creates and removes login identities and turns bearer tokens into an
AuthenticatedIdentity. Account writes are flushed, not committed; the
calling service owns the transaction.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.identity import AuthenticatedIdentity
from driverdesk.domain.errors import AuthenticationError, ConflictError
from driverdesk.infrastructure.auth.jwt_service import JWTError, JWTService, jwt_service
from driverdesk.infrastructure.auth.password_hasher import (
    hash_password,
    needs_rehash,
    verify_password,
)
from driverdesk.infrastructure.persistence.models import UserModel
from driverdesk.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)


class IdentityProvider:
    """Identity management over the local users table."""

    def __init__(self, session: AsyncSession, tokens: JWTService | None = None) -> None:
        """Initialize the identity provider.

        Args:
            session: SQLAlchemy async session.
            tokens: JWT service, defaults to the module-level instance.
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.tokens = tokens or jwt_service

    async def create_account(
        self,
        email: str,
        temp_credential: str,
        metadata: dict | None = None,
    ) -> str:
        """Create a login identity.

        Args:
            email: Login email; stored lowercased.
            temp_credential: Initial password (temporary or user-chosen).
            metadata: Free-form metadata stored with the identity.

        Returns:
            The new identity ID.

        Raises:
            ConflictError: If an identity already holds the email.
        """
        email = email.strip().lower()
        if await self.user_repo.email_exists(email):
            raise ConflictError("A user with this email already exists")

        user = UserModel(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=hash_password(temp_credential),
            is_active=True,
            user_metadata=metadata or {},
        )
        await self.user_repo.create(user)
        logger.debug("Identity created", user_id=user.id)
        return user.id

    async def set_credential(self, identity_id: str, credential: str) -> None:
        """Replace the password of an identity."""
        await self.user_repo.update_password(identity_id, hash_password(credential))

    async def delete_account(self, identity_id: str) -> bool:
        """Delete a login identity.

        Returns:
            True if the identity existed and was removed.
        """
        deleted = await self.user_repo.delete(identity_id)
        logger.debug("Identity deleted", user_id=identity_id, deleted=deleted)
        return deleted

    async def authenticate(self, email: str, password: str) -> UserModel | None:
        """Check email and password of an active identity.

        Returns:
            The user model on success, None otherwise.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        if needs_rehash(user.password_hash):
            await self.user_repo.update_password(user.id, hash_password(password))
        await self.user_repo.update_last_login(user.id)
        return user

    def issue_token(self, identity_id: str, email: str) -> str:
        """Create an access token for an identity."""
        return self.tokens.create_access_token(user_id=identity_id, email=email)

    async def verify_token(self, bearer_token: str | None) -> AuthenticatedIdentity:
        """Resolve a bearer token to the identity it was issued for.

        Args:
            bearer_token: Raw access token, without the "Bearer " prefix.

        Returns:
            The authenticated identity.

        Raises:
            AuthenticationError: If the token is missing, invalid, expired, or
                belongs to an unknown or inactive identity.
        """
        if not bearer_token:
            raise AuthenticationError("Authentication required")
        try:
            claims = self.tokens.validate_access_token(bearer_token)
        except JWTError as e:
            raise AuthenticationError("Invalid or expired token") from e

        user = await self.user_repo.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid or expired token")
        return AuthenticatedIdentity(user_id=user.id, email=user.email)
