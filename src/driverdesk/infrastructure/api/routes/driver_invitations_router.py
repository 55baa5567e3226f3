"""Driver invitation API routes.

Endpoints for inviting drivers, listing and cancelling invitations, and
completing onboarding with an invitation token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from driverdesk.domain.entities.invitation import InvitationStatus
from driverdesk.domain.services import DriverInvitationService, RawDriverInput
from driverdesk.infrastructure.api.dependencies import (
    BearerToken,
    Metadata,
    get_invitation_service,
)
from driverdesk.infrastructure.api.schemas import (
    DriverInvitationCreateRequest,
    DriverInvitationListResponse,
    DriverInvitationResponse,
    ErrorResponse,
    InvitationAcceptRequest,
    InvitationAcceptResponse,
    IssuedInvitationResponse,
)

router = APIRouter()

InvitationServiceDep = Annotated[DriverInvitationService, Depends(get_invitation_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=IssuedInvitationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not an admin of the company"},
        409: {"model": ErrorResponse, "description": "Email in use or invitation pending"},
        429: {"model": ErrorResponse, "description": "Invitation rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Email delivery or storage failed"},
    },
)
async def create_invitation(
    request: DriverInvitationCreateRequest,
    token: BearerToken,
    metadata: Metadata,
    service: InvitationServiceDep,
) -> IssuedInvitationResponse:
    """Invite a driver to join a company by email."""
    issued = await service.issue_invitation(
        token,
        RawDriverInput(
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            organization_id=request.company_id,
            rates={"hourly_rate": request.hourly_rate},
        ),
        metadata,
    )
    return IssuedInvitationResponse(
        invitation_id=issued.invitation_id,
        expires_at=issued.expires_at,
        onboarding_url=issued.onboarding_url,
        delivery_id=issued.delivery_id,
    )


@router.get(
    "",
    response_model=DriverInvitationListResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
)
async def list_invitations(
    token: BearerToken,
    metadata: Metadata,
    service: InvitationServiceDep,
    company_id: str = Query(..., description="Company to list invitations for"),
    status_filter: InvitationStatus | None = Query(None, alias="status"),
) -> DriverInvitationListResponse:
    """List a company's driver invitations, newest first."""
    invitations = await service.list_invitations(token, company_id, status_filter, metadata)
    items = [DriverInvitationResponse.from_entity(invitation) for invitation in invitations]
    return DriverInvitationListResponse(invitations=items, total=len(items))


@router.delete(
    "/{invitation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse, "description": "Invitation not found"},
        409: {"model": ErrorResponse, "description": "Invitation is not pending"},
    },
)
async def cancel_invitation(
    invitation_id: str,
    token: BearerToken,
    metadata: Metadata,
    service: InvitationServiceDep,
) -> Response:
    """Cancel a pending invitation."""
    await service.cancel_invitation(token, invitation_id, metadata)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{invite_token}/accept",
    response_model=InvitationAcceptResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Password does not meet requirements"},
        404: {"model": ErrorResponse, "description": "Invitation not found"},
        409: {"model": ErrorResponse, "description": "Invitation no longer pending"},
    },
)
async def accept_invitation(
    invite_token: str,
    request: InvitationAcceptRequest,
    metadata: Metadata,
    service: InvitationServiceDep,
) -> InvitationAcceptResponse:
    """Complete onboarding with an invitation token. No authentication required."""
    accepted = await service.accept_invitation(invite_token, request.password, metadata)
    return InvitationAcceptResponse(
        invitation_id=accepted.invitation_id,
        user_id=accepted.user_id,
        driver_profile_id=accepted.driver_profile_id,
        access_token=accepted.access_token,
        expires_in=accepted.expires_in,
    )
