"""Driver profile repository for database operations."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import DriverProfileModel


class DriverProfileRepository:
    """Repository for the driver_profiles table."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, driver_profile: DriverProfileModel) -> DriverProfileModel:
        """Create a new driver profile."""
        self.session.add(driver_profile)
        await self.session.flush()
        return driver_profile

    async def get_by_id(self, driver_profile_id: str) -> DriverProfileModel | None:
        """Get a driver profile by ID.

        Args:
            driver_profile_id: Driver profile ID (UUID string).

        Returns:
            Driver profile model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DriverProfileModel).where(DriverProfileModel.id == driver_profile_id)
        )
        return result.scalar_one_or_none()

    async def delete(self, driver_profile_id: str) -> int:
        """Delete a driver profile.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(DriverProfileModel).where(DriverProfileModel.id == driver_profile_id)
        )
        await self.session.flush()
        return result.rowcount

    async def exists_for_user(self, user_id: str) -> bool:
        """Check whether the identity still has any driver profile."""
        result = await self.session.execute(
            select(DriverProfileModel.id).where(DriverProfileModel.user_id == user_id).limit(1)
        )
        return result.scalar_one_or_none() is not None
