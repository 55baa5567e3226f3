"""Results returned by the onboarding entry points."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class IssuedInvitation:
    """A persisted invitation whose onboarding email was delivered."""

    invitation_id: str
    token: str
    expires_at: datetime
    onboarding_url: str
    delivery_id: str | None = None


@dataclass(frozen=True)
class ProvisionedDriver:
    """A driver account created directly, without an invitation.

    The temporary password is returned so an administrator can hand it over
    manually when email delivery failed.
    """

    user_id: str
    driver_profile_id: str
    temporary_password: str
    email_sent: bool
    warning: str | None = None


@dataclass(frozen=True)
class AcceptedInvitation:
    """Outcome of completing onboarding with an invitation token."""

    invitation_id: str
    user_id: str
    driver_profile_id: str
    access_token: str
    expires_in: int
