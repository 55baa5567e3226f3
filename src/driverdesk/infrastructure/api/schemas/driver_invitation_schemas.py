"""Pydantic schemas for driver invitation endpoints.

Request fields are deliberately loose: sanitization and validation happen
in the domain validator so that every problem is reported together.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from driverdesk.domain.entities.invitation import DriverInvitation, InvitationStatus


class DriverInvitationCreateRequest(BaseModel):
    """Request schema for inviting a driver."""

    email: str | None = Field(None, description="Email address of the driver")
    first_name: str | None = Field(None, description="Driver first name")
    last_name: str | None = Field(None, description="Driver last name")
    phone: str | None = Field(None, description="Optional phone number")
    hourly_rate: Decimal | str | None = Field(None, description="Optional hourly rate")
    company_id: str | None = Field(None, description="Company the driver is invited to")


class IssuedInvitationResponse(BaseModel):
    """Response schema for a created invitation."""

    invitation_id: str = Field(..., description="Invitation ID")
    expires_at: datetime = Field(..., description="Expiration timestamp")
    onboarding_url: str = Field(..., description="Link sent to the driver")
    delivery_id: str | None = Field(None, description="Email provider delivery ID")
    message: str = "Invitation sent successfully"


class DriverInvitationResponse(BaseModel):
    """Response schema for invitation details. The token is never exposed."""

    id: str
    company_id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    hourly_rate: Decimal | None = None
    status: InvitationStatus = Field(..., description="Effective status")
    created_by: str
    expires_at: datetime
    accepted_at: datetime | None = None
    driver_profile_id: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, invitation: DriverInvitation) -> "DriverInvitationResponse":
        return cls(
            id=invitation.id,
            company_id=invitation.company_id,
            email=invitation.email,
            first_name=invitation.first_name,
            last_name=invitation.last_name,
            phone=invitation.phone,
            hourly_rate=invitation.hourly_rate,
            status=invitation.effective_status,
            created_by=invitation.created_by,
            expires_at=invitation.expires_at,
            accepted_at=invitation.accepted_at,
            driver_profile_id=invitation.driver_profile_id,
            created_at=invitation.created_at,
        )


class DriverInvitationListResponse(BaseModel):
    """Response schema for listing invitations."""

    invitations: list[DriverInvitationResponse]
    total: int


class InvitationAcceptRequest(BaseModel):
    """Request schema for completing onboarding."""

    password: str = Field(..., description="Password for the new driver account")


class InvitationAcceptResponse(BaseModel):
    """Response schema for a completed onboarding."""

    invitation_id: str
    user_id: str
    driver_profile_id: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int
