"""Driver account API routes: direct provisioning, credential resend and
deprovisioning."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from driverdesk.domain.services import (
    AuditAction,
    DriverDeprovisioningService,
    DriverProvisioningService,
    OnboardingGuard,
    RawDriverInput,
    sanitize_input,
)
from driverdesk.infrastructure.api.dependencies import (
    BearerToken,
    Metadata,
    get_deprovisioning_service,
    get_onboarding_guard,
    get_provisioning_service,
)
from driverdesk.infrastructure.api.schemas import (
    DeletionSummaryResponse,
    DriverCreateRequest,
    ErrorResponse,
    ProvisionedDriverResponse,
    ResendCredentialsResponse,
)

router = APIRouter()

ProvisioningServiceDep = Annotated[DriverProvisioningService, Depends(get_provisioning_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProvisionedDriverResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)
async def create_driver(
    request: DriverCreateRequest,
    token: BearerToken,
    metadata: Metadata,
    service: ProvisioningServiceDep,
) -> ProvisionedDriverResponse:
    """Create a driver account with a temporary password."""
    provisioned = await service.provision_driver(
        token,
        RawDriverInput(
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            organization_id=request.company_id,
            rates={"parcel_rate": request.parcel_rate, "cover_rate": request.cover_rate},
        ),
        metadata,
    )
    return ProvisionedDriverResponse(
        user_id=provisioned.user_id,
        driver_profile_id=provisioned.driver_profile_id,
        temporary_password=provisioned.temporary_password,
        email_sent=provisioned.email_sent,
        warning=provisioned.warning,
    )


@router.post(
    "/{driver_profile_id}/resend-credentials",
    response_model=ResendCredentialsResponse,
    responses={
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Email delivery failed"},
    },
)
async def resend_credentials(
    driver_profile_id: str,
    token: BearerToken,
    metadata: Metadata,
    service: ProvisioningServiceDep,
) -> ResendCredentialsResponse:
    """Rotate a driver's temporary password and email it again."""
    delivery_id = await service.resend_credentials(token, driver_profile_id, metadata)
    return ResendCredentialsResponse(delivery_id=delivery_id)


@router.delete(
    "/{driver_profile_id}",
    response_model=DeletionSummaryResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Driver has a shift in progress"},
    },
)
async def delete_driver(
    driver_profile_id: str,
    token: BearerToken,
    metadata: Metadata,
    guard: Annotated[OnboardingGuard, Depends(get_onboarding_guard)],
    service: Annotated[DriverDeprovisioningService, Depends(get_deprovisioning_service)],
    company_id: str = Query(..., description="Company the driver belongs to"),
) -> DeletionSummaryResponse:
    """Delete a driver, their records and, when unused elsewhere, their account."""
    company_id = sanitize_input(company_id).lower()
    identity = await guard.identity_provider.verify_token(token)
    await guard.require_company_admin(
        identity,
        company_id,
        metadata,
        action=AuditAction.UNAUTHORIZED_DEPROVISION_ATTEMPT,
        subject_id=driver_profile_id,
        flow="deprovision",
    )
    summary = await service.deprovision(
        driver_profile_id,
        expected_organization_id=company_id,
        actor_id=identity.user_id,
        metadata=metadata,
    )
    return DeletionSummaryResponse(**summary.to_dict())
