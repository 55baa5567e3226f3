"""SQLAlchemy model for the invitation_rate_limits table.

One row per (actor, company, window). The limiter reads the newest window
for a pair and either increments it or opens a new one.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now


class InvitationRateLimitModel(Base):
    """SQLAlchemy model for the invitation_rate_limits table.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Admin identity that sends invitations.
        company_id: Company the invitations are sent for.
        invitations_sent: Invitations counted in this window.
        window_start: Start of the fixed window.
        updated_at: Last time the counter changed.
    """

    __tablename__ = "invitation_rate_limits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    company_id: Mapped[str] = mapped_column(String(36), nullable=False)
    invitations_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    window_start: Mapped[datetime] = mapped_column(
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
        Index(
            "ix_invitation_rate_limits_user_company_window",
            "user_id",
            "company_id",
            "window_start",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<InvitationRateLimit(user_id={self.user_id}, company_id={self.company_id}, "
            f"sent={self.invitations_sent})>"
        )
