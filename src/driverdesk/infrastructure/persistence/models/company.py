"""SQLAlchemy model for the companies table.

A company is the tenant boundary: every driver profile, invitation and
rate-limit window belongs to exactly one.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now


class CompanyModel(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Company ID (UUID)",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"
