"""Driver invitation repository for database operations."""

from datetime import datetime, timezone

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.domain.entities.invitation import DriverInvitation, InvitationStatus
from driverdesk.infrastructure.persistence.models import DriverInvitationModel


class DriverInvitationRepository:
    """Repository for driver invitation database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, invitation: DriverInvitationModel) -> DriverInvitationModel:
        """Create a new invitation.

        Args:
            invitation: Invitation model to create.

        Returns:
            Created invitation model.
        """
        self.session.add(invitation)
        await self.session.flush()
        return invitation

    async def get_by_token(self, token: str) -> DriverInvitationModel | None:
        """Get an invitation by its onboarding token.

        Args:
            token: Invitation token.

        Returns:
            Invitation model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DriverInvitationModel).where(DriverInvitationModel.invite_token == token)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, invitation_id: str) -> DriverInvitationModel | None:
        """Get an invitation by ID.

        Args:
            invitation_id: Invitation ID (UUID string).

        Returns:
            Invitation model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DriverInvitationModel).where(DriverInvitationModel.id == invitation_id)
        )
        return result.scalar_one_or_none()

    async def get_pending(self, email: str, company_id: str) -> DriverInvitationModel | None:
        """Get the stored-pending invitation for an email in a company.

        The row may already be past its expiry; callers resolve that through
        the model's effective status.

        Args:
            email: Lowercased email address.
            company_id: Company ID.

        Returns:
            Invitation model if found, None otherwise.
        """
        result = await self.session.execute(
            select(DriverInvitationModel)
            .where(
                and_(
                    DriverInvitationModel.email == email,
                    DriverInvitationModel.company_id == company_id,
                    DriverInvitationModel.status == InvitationStatus.PENDING.value,
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_by_company(
        self,
        company_id: str,
        status: InvitationStatus | None = None,
    ) -> list[DriverInvitationModel]:
        """List invitations for a company, newest first.

        Filtering uses the effective status, so a pending row past its expiry
        is listed as expired.

        Args:
            company_id: Company ID to filter by.
            status: Optional status filter.

        Returns:
            List of invitation models.
        """
        query = select(DriverInvitationModel).where(
            DriverInvitationModel.company_id == company_id
        )
        now = datetime.now(timezone.utc)

        if status is InvitationStatus.PENDING:
            query = query.where(
                and_(
                    DriverInvitationModel.status == InvitationStatus.PENDING.value,
                    DriverInvitationModel.expires_at > now,
                )
            )
        elif status is InvitationStatus.EXPIRED:
            query = query.where(
                or_(
                    DriverInvitationModel.status == InvitationStatus.EXPIRED.value,
                    and_(
                        DriverInvitationModel.status == InvitationStatus.PENDING.value,
                        DriverInvitationModel.expires_at <= now,
                    ),
                )
            )
        elif status is not None:
            query = query.where(DriverInvitationModel.status == status.value)

        query = query.order_by(DriverInvitationModel.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def set_status(self, invitation: DriverInvitationModel, status: InvitationStatus) -> None:
        """Rewrite the stored status of an invitation."""
        invitation.status = status.value
        await self.session.flush()

    async def expire_stale(self, now: datetime | None = None) -> int:
        """Rewrite every pending invitation past its expiry to expired.

        Returns:
            Number of invitations expired.
        """
        now = now or datetime.now(timezone.utc)
        result = await self.session.execute(
            update(DriverInvitationModel)
            .where(
                and_(
                    DriverInvitationModel.status == InvitationStatus.PENDING.value,
                    DriverInvitationModel.expires_at <= now,
                )
            )
            .values(status=InvitationStatus.EXPIRED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return result.rowcount

    async def delete(self, invitation_id: str) -> bool:
        """Delete an invitation.

        Args:
            invitation_id: ID of the invitation to delete.

        Returns:
            True if invitation was deleted, False if not found.
        """
        result = await self.session.execute(
            delete(DriverInvitationModel).where(DriverInvitationModel.id == invitation_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def detach_driver_profile(self, driver_profile_id: str) -> int:
        """Clear links from accepted invitations to a driver profile.

        Returns:
            Number of invitations updated.
        """
        result = await self.session.execute(
            update(DriverInvitationModel)
            .where(DriverInvitationModel.driver_profile_id == driver_profile_id)
            .values(driver_profile_id=None)
        )
        await self.session.flush()
        return result.rowcount

    @staticmethod
    def to_entity(model: DriverInvitationModel) -> DriverInvitation:
        """Convert a model to the domain entity."""
        return DriverInvitation(
            id=model.id,
            company_id=model.company_id,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            invite_token=model.invite_token,
            created_by=model.created_by,
            expires_at=model.expires_at,
            status=InvitationStatus(model.status),
            phone=model.phone,
            hourly_rate=model.hourly_rate,
            accepted_at=model.accepted_at,
            driver_profile_id=model.driver_profile_id,
            created_at=model.created_at,
        )
