"""FastAPI dependencies: bearer tokens, request metadata and service wiring.

Every service of one request shares the same database session.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.config import Settings, get_settings
from driverdesk.domain.entities.request_metadata import RequestMetadata
from driverdesk.domain.services import (
    DriverDeprovisioningService,
    DriverInputValidator,
    DriverInvitationService,
    DriverProvisioningService,
    InvitationRateLimiter,
    OnboardingGuard,
    SecurityAuditService,
)
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.persistence.database import get_db_session
from driverdesk.infrastructure.services.email import EmailService
from driverdesk.infrastructure.services.email import get_email_service as _get_email_service


def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Missing or malformed headers yield None; the services decide how to
    reject and audit that.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def get_request_metadata(request: Request) -> RequestMetadata:
    return RequestMetadata.from_request(request)


def get_email_service() -> EmailService:
    """Notification sender dependency; overridden in tests."""
    return _get_email_service()


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
BearerToken = Annotated[str | None, Depends(get_bearer_token)]
Metadata = Annotated[RequestMetadata, Depends(get_request_metadata)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_identity_provider(session: SessionDep) -> IdentityProvider:
    return IdentityProvider(session)


def get_audit_service(session: SessionDep) -> SecurityAuditService:
    return SecurityAuditService(session)


def get_onboarding_guard(
    session: SessionDep,
    settings: SettingsDep,
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit_service: Annotated[SecurityAuditService, Depends(get_audit_service)],
) -> OnboardingGuard:
    return OnboardingGuard(
        session=session,
        identity_provider=identity_provider,
        rate_limiter=InvitationRateLimiter(session),
        audit_service=audit_service,
        validator=DriverInputValidator(settings.disposable_email_domains),
    )


def get_invitation_service(
    session: SessionDep,
    settings: SettingsDep,
    guard: Annotated[OnboardingGuard, Depends(get_onboarding_guard)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit_service: Annotated[SecurityAuditService, Depends(get_audit_service)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> DriverInvitationService:
    return DriverInvitationService(
        session=session,
        guard=guard,
        identity_provider=identity_provider,
        audit_service=audit_service,
        email_service=email_service,
        settings=settings,
    )


def get_provisioning_service(
    session: SessionDep,
    settings: SettingsDep,
    guard: Annotated[OnboardingGuard, Depends(get_onboarding_guard)],
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit_service: Annotated[SecurityAuditService, Depends(get_audit_service)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> DriverProvisioningService:
    return DriverProvisioningService(
        session=session,
        guard=guard,
        identity_provider=identity_provider,
        audit_service=audit_service,
        email_service=email_service,
        settings=settings,
    )


def get_deprovisioning_service(
    session: SessionDep,
    identity_provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    audit_service: Annotated[SecurityAuditService, Depends(get_audit_service)],
) -> DriverDeprovisioningService:
    return DriverDeprovisioningService(
        session=session,
        identity_provider=identity_provider,
        audit_service=audit_service,
    )
