"""SQLAlchemy models for shared profiles and company memberships."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now

USER_TYPES = ("admin", "driver", "staff")


class ProfileModel(Base):
    """Shared profile record, one per identity.

    Attributes:
        id: Primary key (UUID string).
        user_id: Identity this profile describes.
        email: Contact email.
        first_name: Given name.
        last_name: Family name.
        phone: Optional phone number.
        user_type: admin, driver or staff.
        company_id: Primary company of the identity.
        is_active: Whether the profile is active.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        unique=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    user_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="driver",
    )
    company_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("companies.id"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        CheckConstraint(
            "user_type IN ('admin', 'driver', 'staff')",
            name="ck_profiles_user_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, user_type={self.user_type})>"


class UserCompanyModel(Base):
    """Membership of an identity in a company with a role."""

    __tablename__ = "user_companies"

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
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="driver")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_user_companies_user_company"),
        CheckConstraint(
            "role IN ('admin', 'driver', 'staff')",
            name="ck_user_companies_role",
        ),
    )

    def __repr__(self) -> str:
        return f"<UserCompany(user_id={self.user_id}, company_id={self.company_id}, role={self.role})>"
