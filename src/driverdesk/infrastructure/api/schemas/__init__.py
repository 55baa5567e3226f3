"""API Schemas for request/response validation."""

from driverdesk.infrastructure.api.schemas.auth_schemas import (
    ErrorResponse,
    LoginRequest,
    TokenResponse,
)
from driverdesk.infrastructure.api.schemas.driver_invitation_schemas import (
    DriverInvitationCreateRequest,
    DriverInvitationListResponse,
    DriverInvitationResponse,
    InvitationAcceptRequest,
    InvitationAcceptResponse,
    IssuedInvitationResponse,
)
from driverdesk.infrastructure.api.schemas.driver_schemas import (
    DeletionSummaryResponse,
    DriverCreateRequest,
    ProvisionedDriverResponse,
    ResendCredentialsResponse,
)

__all__ = [
    "DeletionSummaryResponse",
    "DriverCreateRequest",
    "DriverInvitationCreateRequest",
    "DriverInvitationListResponse",
    "DriverInvitationResponse",
    "ErrorResponse",
    "InvitationAcceptRequest",
    "InvitationAcceptResponse",
    "IssuedInvitationResponse",
    "LoginRequest",
    "ProvisionedDriverResponse",
    "ResendCredentialsResponse",
    "TokenResponse",
]
