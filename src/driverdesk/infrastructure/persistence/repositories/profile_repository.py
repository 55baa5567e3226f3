"""Repositories for shared profiles and company memberships."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import ProfileModel, UserCompanyModel


class ProfileRepository:
    """Repository for the profiles table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, profile: ProfileModel) -> ProfileModel:
        """Create a new profile.

        Args:
            profile: Profile model to create.

        Returns:
            Created profile model.
        """
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_by_user_id(self, user_id: str) -> ProfileModel | None:
        """Get the profile of an identity.

        Args:
            user_id: Identity ID.

        Returns:
            Profile model if found, None otherwise.
        """
        result = await self.session.execute(
            select(ProfileModel).where(ProfileModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def delete_by_user_id(self, user_id: str) -> int:
        """Delete the profile of an identity.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(ProfileModel).where(ProfileModel.user_id == user_id)
        )
        await self.session.flush()
        return result.rowcount


class UserCompanyRepository:
    """Repository for the user_companies membership table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, membership: UserCompanyModel) -> UserCompanyModel:
        """Create a new membership."""
        self.session.add(membership)
        await self.session.flush()
        return membership

    async def get(self, user_id: str, company_id: str) -> UserCompanyModel | None:
        """Get the membership of an identity in one company."""
        result = await self.session.execute(
            select(UserCompanyModel).where(
                UserCompanyModel.user_id == user_id,
                UserCompanyModel.company_id == company_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: str) -> list[UserCompanyModel]:
        """List every membership of an identity.

        Args:
            user_id: Identity ID.

        Returns:
            List of membership models.
        """
        result = await self.session.execute(
            select(UserCompanyModel).where(UserCompanyModel.user_id == user_id)
        )
        return list(result.scalars().all())

    async def delete_by_user_id(self, user_id: str) -> int:
        """Delete every membership of an identity.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(UserCompanyModel).where(UserCompanyModel.user_id == user_id)
        )
        await self.session.flush()
        return result.rowcount

    async def delete(self, user_id: str, company_id: str) -> int:
        """Delete the membership of an identity in one company.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(UserCompanyModel).where(
                UserCompanyModel.user_id == user_id,
                UserCompanyModel.company_id == company_id,
            )
        )
        await self.session.flush()
        return result.rowcount
