"""Preflight checks shared by both driver onboarding entry points.

Invitation issuance and direct provisioning run the same pipeline, in this
order: authenticate the actor, require company admin rights, count the
attempt against the rate limit, validate the input, and reject emails that
already belong to an identity. Every rejection is audited before it is
raised.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.identity import AuthenticatedIdentity
from driverdesk.domain.entities.request_metadata import RequestMetadata
from driverdesk.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    RateLimitExceededError,
    ValidationFailedError,
)
from driverdesk.domain.services.driver_input_validator import (
    DriverInputValidator,
    NormalizedDriverInput,
    RawDriverInput,
    sanitize_input,
)
from driverdesk.domain.services.invitation_rate_limiter import InvitationRateLimiter
from driverdesk.domain.services.security_audit_service import (
    ANONYMOUS_ACTOR,
    AuditAction,
    SecurityAuditService,
)
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.persistence.repositories import (
    ProfileRepository,
    UserCompanyRepository,
    UserRepository,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class GuardPass:
    """Result of a successful preflight."""

    identity: AuthenticatedIdentity
    data: NormalizedDriverInput


class OnboardingGuard:
    """Authentication, authorization, rate limit and validation pipeline."""

    def __init__(
        self,
        session: AsyncSession,
        identity_provider: IdentityProvider,
        rate_limiter: InvitationRateLimiter,
        audit_service: SecurityAuditService,
        validator: DriverInputValidator,
    ) -> None:
        """Initialize the guard.

        Args:
            session: SQLAlchemy async session.
            identity_provider: Verifies bearer tokens.
            rate_limiter: Per-admin counter.
            audit_service: Security audit trail.
            validator: Driver input validator.
        """
        self.session = session
        self.identity_provider = identity_provider
        self.rate_limiter = rate_limiter
        self.audit_service = audit_service
        self.validator = validator
        self.user_repo = UserRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.membership_repo = UserCompanyRepository(session)

    async def authenticate(
        self,
        actor_token: str | None,
        metadata: RequestMetadata,
        flow: str = "invitation",
    ) -> AuthenticatedIdentity:
        """Verify the actor's bearer token.

        Raises:
            AuthenticationError: If the token does not verify; audited.
        """
        try:
            return await self.identity_provider.verify_token(actor_token)
        except AuthenticationError as e:
            await self.audit_service.record(
                None,
                AuditAction.UNAUTHENTICATED_INVITE_ATTEMPT,
                ANONYMOUS_ACTOR,
                {"flow": flow, "reason": e.message},
                metadata,
            )
            raise

    async def is_company_admin(self, user_id: str, company_id: str) -> bool:
        """Check for an admin profile in the company or an admin membership."""
        profile = await self.profile_repo.get_by_user_id(user_id)
        if profile is not None and profile.user_type == "admin" and profile.company_id == company_id:
            return True
        membership = await self.membership_repo.get(user_id, company_id)
        return membership is not None and membership.role == "admin"

    async def require_company_admin(
        self,
        identity: AuthenticatedIdentity,
        company_id: str,
        metadata: RequestMetadata,
        action: AuditAction = AuditAction.UNAUTHORIZED_INVITE_ATTEMPT,
        subject_id: str | None = None,
        flow: str = "invitation",
    ) -> None:
        """Require the identity to administer the company.

        Raises:
            AuthorizationError: If it does not; audited with the attempted
                and actual company and the actor's user type.
        """
        if await self.is_company_admin(identity.user_id, company_id):
            return

        profile = await self.profile_repo.get_by_user_id(identity.user_id)
        await self.audit_service.record(
            subject_id,
            action,
            identity.user_id,
            {
                "flow": flow,
                "attempted_company_id": company_id,
                "actual_company_id": profile.company_id if profile else None,
                "user_type": profile.user_type if profile else None,
            },
            metadata,
        )
        logger.warning(
            "Unauthorized driver management attempt",
            user_id=identity.user_id,
            company_id=company_id,
            flow=flow,
        )
        raise AuthorizationError("Admin access to this company is required")

    async def reject(
        self,
        identity: AuthenticatedIdentity,
        reason: str,
        details: dict,
        metadata: RequestMetadata,
        subject_id: str | None = None,
    ) -> None:
        """Audit a caller-fixable rejection. Not a security event."""
        await self.audit_service.record(
            subject_id,
            AuditAction.INVITATION_REJECTED,
            identity.user_id,
            {"category": "user_error", "reason": reason, **details},
            metadata,
        )

    async def preflight(
        self,
        actor_token: str | None,
        raw: RawDriverInput,
        rate_ceiling: Decimal,
        metadata: RequestMetadata,
        flow: str = "invitation",
    ) -> GuardPass:
        """Run every shared precondition for onboarding a driver.

        Args:
            actor_token: Bearer token of the acting admin.
            raw: Unvalidated driver details.
            rate_ceiling: Upper bound for the supplied rates.
            metadata: Request metadata for audit entries.
            flow: Entry point name recorded in audit details.

        Returns:
            The authenticated identity and the normalized input.

        Raises:
            AuthenticationError: Token missing or invalid.
            AuthorizationError: Actor is not an admin of the company.
            RateLimitExceededError: Actor reached the onboarding cap.
            ValidationFailedError: Input has problems; details list them all.
            ConflictError: An identity already holds the email.
        """
        identity = await self.authenticate(actor_token, metadata, flow)

        company_id = sanitize_input(raw.organization_id).lower()
        await self.require_company_admin(identity, company_id, metadata, flow=flow)

        decision = await self.rate_limiter.check_and_increment(identity.user_id, company_id)
        if not decision.allowed:
            await self.audit_service.record(
                None,
                AuditAction.RATE_LIMIT_EXCEEDED,
                identity.user_id,
                {
                    "flow": flow,
                    "company_id": company_id,
                    "attempted_email": sanitize_input(raw.email).lower(),
                },
                metadata,
            )
            raise RateLimitExceededError(decision.reason, details={"remaining": decision.remaining})

        result = self.validator.validate(raw, rate_ceiling)
        if not result.is_valid:
            issues = result.issue_dicts()
            await self.reject(
                identity,
                "validation_failed",
                {"flow": flow, "company_id": company_id, "issues": issues},
                metadata,
            )
            raise ValidationFailedError("Validation failed", details=issues)

        data = result.normalized
        if await self.user_repo.email_exists(data.email):
            await self.reject(
                identity,
                "email_in_use",
                {"flow": flow, "company_id": company_id, "email": data.email},
                metadata,
            )
            raise ConflictError("A user with this email already exists")

        return GuardPass(identity=identity, data=data)
