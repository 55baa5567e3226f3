"""User repository for database operations."""

from datetime import datetime, timezone

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for login identities."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID (UUID string).

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserModel | None:
        """Get a user by email. Emails are stored lowercased.

        Args:
            email: Email address to look up.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check whether any identity already holds the email."""
        result = await self.session.execute(
            select(UserModel.id).where(UserModel.email == email.strip().lower()).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def update_password(self, user_id: str, password_hash: str) -> None:
        """Replace a user's password hash.

        Args:
            user_id: User ID.
            password_hash: New argon2 hash.
        """
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
        )
        await self.session.flush()

    async def update_last_login(self, user_id: str) -> None:
        """Record a successful login."""
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(last_login=datetime.now(timezone.utc))
        )
        await self.session.flush()

    async def delete(self, user_id: str) -> bool:
        """Delete a user.

        Args:
            user_id: User ID.

        Returns:
            True if a row was deleted, False if not found.
        """
        result = await self.session.execute(
            delete(UserModel).where(UserModel.id == user_id)
        )
        await self.session.flush()
        return result.rowcount > 0
