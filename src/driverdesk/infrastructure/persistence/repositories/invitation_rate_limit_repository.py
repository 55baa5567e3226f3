"""Counter store for per-admin invitation rate limiting."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import InvitationRateLimitModel


class InvitationRateLimitRepository:
    """Repository for invitation rate-limit windows."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get_current_window(
        self,
        user_id: str,
        company_id: str,
        since: datetime,
    ) -> InvitationRateLimitModel | None:
        """Get the newest window for a pair that started after ``since``.

        Args:
            user_id: Admin identity ID.
            company_id: Company ID.
            since: Earliest window start still considered current.

        Returns:
            The window model if one is current, None otherwise.
        """
        result = await self.session.execute(
            select(InvitationRateLimitModel)
            .where(
                InvitationRateLimitModel.user_id == user_id,
                InvitationRateLimitModel.company_id == company_id,
                InvitationRateLimitModel.window_start >= since,
            )
            .order_by(InvitationRateLimitModel.window_start.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def open_window(
        self,
        user_id: str,
        company_id: str,
        window_start: datetime,
    ) -> InvitationRateLimitModel:
        """Start a new window with one invitation counted."""
        window = InvitationRateLimitModel(
            user_id=user_id,
            company_id=company_id,
            invitations_sent=1,
            window_start=window_start,
            updated_at=window_start,
        )
        self.session.add(window)
        await self.session.flush()
        return window

    async def increment(self, window: InvitationRateLimitModel) -> int:
        """Count one more invitation in an existing window.

        Returns:
            The new count.
        """
        window.invitations_sent += 1
        await self.session.flush()
        return window.invitations_sent
