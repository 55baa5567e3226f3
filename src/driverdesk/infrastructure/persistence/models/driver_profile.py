"""SQLAlchemy model for the driver_profiles table.

A driver profile is the company-scoped operational record of one identity.
Every dependent record (logs, expenses, invoices ...) references it.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now

DRIVER_STATUSES = ("pending", "active", "suspended")


class DriverProfileModel(Base):
    """SQLAlchemy model for the driver_profiles table.

    Attributes:
        id: Primary key (UUID string).
        user_id: Identity the profile belongs to.
        company_id: Company the driver works for.
        status: pending, active or suspended.
        assigned_van_id: Currently assigned vehicle, if any.
        parcel_rate: Pay per parcel delivered.
        cover_rate: Pay per covered parcel.
        hourly_rate: Hourly pay rate.
        requires_onboarding: Whether the driver still has to complete onboarding.
        first_login_completed: Whether the driver has logged in once.
        onboarding_progress: Per-step onboarding flags.
        onboarding_completed_at: When onboarding finished.
    """

    __tablename__ = "driver_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    assigned_van_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    parcel_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    cover_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    requires_onboarding: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    first_login_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    onboarding_progress: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    onboarding_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_driver_profiles_user_company"),
        CheckConstraint(
            "status IN ('pending', 'active', 'suspended')",
            name="ck_driver_profiles_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<DriverProfile(id={self.id}, company_id={self.company_id}, status={self.status})>"
