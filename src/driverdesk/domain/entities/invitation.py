"""Driver invitation entity.

An invitation identifies a prospective driver before an account exists.
It carries a secure token the invitee uses to complete onboarding, and
expires after a configured window.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum


class InvitationStatus(str, Enum):
    """Invitation lifecycle states."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as stored by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def effective_invitation_status(
    stored_status: str,
    expires_at: datetime,
    now: datetime | None = None,
) -> InvitationStatus:
    """Resolve the status an invitation has right now.

    A pending invitation past its expiry is expired for every purpose, even
    when the stored status has not been rewritten yet.

    Args:
        stored_status: Status value persisted on the row.
        expires_at: Expiry timestamp of the invitation.
        now: Reference time, defaults to the current UTC time.

    Returns:
        The effective InvitationStatus.
    """
    status = InvitationStatus(stored_status)
    if status is not InvitationStatus.PENDING:
        return status
    now = now or datetime.now(timezone.utc)
    if as_utc(expires_at) <= now:
        return InvitationStatus.EXPIRED
    return InvitationStatus.PENDING


@dataclass
class DriverInvitation:
    """Invitation for a prospective driver to join a company.

    Attributes:
        id: Unique identifier (UUID string).
        company_id: Company the driver is invited to.
        email: Lowercased email address of the invitee.
        first_name: Invitee first name.
        last_name: Invitee last name.
        invite_token: Opaque high-entropy token, a capability-bearing secret.
        created_by: Identity ID of the inviting administrator.
        expires_at: Timestamp when the invitation expires.
        status: Stored lifecycle status.
        phone: Optional phone number.
        hourly_rate: Optional hourly pay rate.
        accepted_at: Timestamp when the invitation was accepted.
        driver_profile_id: Driver profile created on acceptance.
        created_at: Timestamp when the invitation was created.
    """

    id: str
    company_id: str
    email: str
    first_name: str
    last_name: str
    invite_token: str
    created_by: str
    expires_at: datetime
    status: InvitationStatus = InvitationStatus.PENDING
    phone: str | None = None
    hourly_rate: Decimal | None = None
    accepted_at: datetime | None = None
    driver_profile_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Invitation ID is required")
        if not self.company_id:
            raise ValueError("Company ID is required")
        if not self.email:
            raise ValueError("Email is required")
        if not self.invite_token:
            raise ValueError("Invite token is required")

    @property
    def effective_status(self) -> InvitationStatus:
        return effective_invitation_status(self.status, self.expires_at)

    @property
    def is_expired(self) -> bool:
        return self.effective_status is InvitationStatus.EXPIRED

    @property
    def is_accepted(self) -> bool:
        return self.status is InvitationStatus.ACCEPTED
