"""Repository for records that hang off a driver profile."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import DailyLogModel
from driverdesk.infrastructure.persistence.models.driver_records import DriverRecordMixin


class DriverRecordRepository:
    """Bulk operations over the driver-dependent tables."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def delete_for_driver(
        self,
        model: type[DriverRecordMixin],
        driver_profile_id: str,
    ) -> int:
        """Delete every row of one dependent table for a driver.

        Args:
            model: Dependent record model class.
            driver_profile_id: Driver profile ID.

        Returns:
            Number of rows deleted.
        """
        result = await self.session.execute(
            delete(model).where(model.driver_id == driver_profile_id)
        )
        await self.session.flush()
        return result.rowcount

    async def has_active_daily_log(self, driver_profile_id: str) -> bool:
        """Check whether the driver has a shift in progress."""
        result = await self.session.execute(
            select(DailyLogModel.id)
            .where(
                DailyLogModel.driver_id == driver_profile_id,
                DailyLogModel.status == "in_progress",
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
