"""Security audit repository.

Write-only apart from reads for review: UPDATE and DELETE are not provided,
and the table rejects both at the database level.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import SecurityAuditLogModel


class SecurityAuditRepository:
    """Repository for security audit entries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, entry: SecurityAuditLogModel) -> SecurityAuditLogModel:
        """Append an audit entry.

        Args:
            entry: Audit entry to persist.

        Returns:
            The persisted entry.
        """
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_entries(
        self,
        action: str | None = None,
        subject_id: str | None = None,
        performed_by: str | None = None,
        limit: int = 100,
    ) -> list[SecurityAuditLogModel]:
        """List audit entries, newest first.

        Args:
            action: Optional action name filter.
            subject_id: Optional subject filter.
            performed_by: Optional actor filter.
            limit: Maximum number of entries.

        Returns:
            List of audit entries.
        """
        query = select(SecurityAuditLogModel)
        if action is not None:
            query = query.where(SecurityAuditLogModel.action == action)
        if subject_id is not None:
            query = query.where(SecurityAuditLogModel.subject_id == subject_id)
        if performed_by is not None:
            query = query.where(SecurityAuditLogModel.performed_by == performed_by)
        query = query.order_by(SecurityAuditLogModel.id.desc()).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
