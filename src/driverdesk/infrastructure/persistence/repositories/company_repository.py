"""Company repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.infrastructure.persistence.models import CompanyModel


class CompanyRepository:
    """Repository for the companies table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, company: CompanyModel) -> CompanyModel:
        """Create a new company."""
        self.session.add(company)
        await self.session.flush()
        return company

    async def get_by_id(self, company_id: str) -> CompanyModel | None:
        """Get a company by ID.

        Args:
            company_id: Company ID (UUID string).

        Returns:
            Company model if found, None otherwise.
        """
        result = await self.session.execute(
            select(CompanyModel).where(CompanyModel.id == company_id)
        )
        return result.scalar_one_or_none()
