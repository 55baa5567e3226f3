"""SQLAlchemy model for the driver_invitations table.

Invitations let company admins invite prospective drivers by email.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.domain.entities.invitation import (
    InvitationStatus,
    effective_invitation_status,
)
from driverdesk.infrastructure.persistence.database import Base, utc_now


class DriverInvitationModel(Base):
    """SQLAlchemy model for the driver_invitations table.

    At most one pending invitation may exist per (email, company); a partial
    unique index enforces this even under concurrent issuance.

    Attributes:
        id: Primary key (UUID string).
        email: Lowercased email address of the invitee.
        first_name: Invitee first name.
        last_name: Invitee last name.
        phone: Optional phone number.
        hourly_rate: Optional hourly pay rate.
        company_id: Foreign key to companies table.
        invite_token: Secure random token for completing onboarding.
        status: pending, accepted, expired or cancelled.
        created_by: Identity ID of the inviting admin.
        expires_at: Timestamp when the invitation expires.
        accepted_at: Timestamp when the invitation was accepted.
        driver_profile_id: Driver profile created when the invitation was accepted.
    """

    __tablename__ = "driver_invitations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Invitation ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Email address of the invited driver",
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
        comment="Foreign key to companies table",
    )
    invite_token: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        index=True,
        comment="Secure random token for completing onboarding",
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=InvitationStatus.PENDING.value,
    )
    created_by: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="Identity ID of the inviting admin",
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Timestamp when the invitation expires",
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp when the invitation was accepted",
    )
    driver_profile_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("driver_profiles.id", ondelete="SET NULL"),
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
        Index("ix_driver_invitations_company_email", "company_id", "email"),
        Index(
            "uq_driver_invitations_pending_email",
            "company_id",
            "email",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'cancelled')",
            name="ck_driver_invitations_status",
        ),
    )

    @property
    def effective_status(self) -> InvitationStatus:
        """Status with lazy expiry applied."""
        return effective_invitation_status(self.status, self.expires_at)

    def __repr__(self) -> str:
        return (
            f"<DriverInvitation(id={self.id}, email={self.email}, "
            f"company_id={self.company_id}, status={self.status})>"
        )
