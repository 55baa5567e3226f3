"""Driver invitation lifecycle.

An invitation moves from pending to accepted, expired or cancelled. Expiry
is lazy: a pending row past its expiry is treated as expired everywhere and
rewritten when an operation touches it or when the sweep runs.

An invitation row only survives issuance when its onboarding email was
handed to the provider; otherwise it is removed again.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.config import Settings, get_settings
from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.invitation import DriverInvitation, InvitationStatus
from driverdesk.domain.entities.onboarding import AcceptedInvitation, IssuedInvitation
from driverdesk.domain.entities.request_metadata import SYSTEM_METADATA, RequestMetadata
from driverdesk.domain.errors import (
    ConflictError,
    DependencyFailureError,
    EmailDeliveryFailedError,
    NotFoundError,
    ValidationFailedError,
)
from driverdesk.domain.services.driver_input_validator import RawDriverInput
from driverdesk.domain.services.onboarding_guard import OnboardingGuard
from driverdesk.domain.services.password_validator import (
    PasswordValidator,
    default_password_validator,
)
from driverdesk.domain.services.security_audit_service import AuditAction, SecurityAuditService
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.persistence.models import (
    DriverInvitationModel,
    DriverProfileModel,
    ProfileModel,
    UserCompanyModel,
)
from driverdesk.infrastructure.persistence.repositories import (
    CompanyRepository,
    DriverInvitationRepository,
    DriverProfileRepository,
    ProfileRepository,
    UserCompanyRepository,
)
from driverdesk.infrastructure.services.email import EmailDeliveryError, EmailService
from driverdesk.infrastructure.services.token_service import token_service

logger = get_logger(__name__)

DUPLICATE_INVITATION_MESSAGE = "An active invitation for this email already exists"
EMAIL_FAILED_MESSAGE = "Failed to send invitation email. The invitation has been cancelled."


class DriverInvitationService:
    """Issues, cancels, accepts, lists and expires driver invitations."""

    def __init__(
        self,
        session: AsyncSession,
        guard: OnboardingGuard,
        identity_provider: IdentityProvider,
        audit_service: SecurityAuditService,
        email_service: EmailService,
        settings: Settings | None = None,
        password_validator: PasswordValidator | None = None,
    ) -> None:
        """Initialize the invitation service.

        Args:
            session: SQLAlchemy async session.
            guard: Shared onboarding preflight.
            identity_provider: Creates identities and issues access tokens.
            audit_service: Security audit trail.
            email_service: Notification sender.
            settings: Application settings.
            password_validator: Policy for passwords chosen on acceptance.
        """
        self.session = session
        self.guard = guard
        self.identity_provider = identity_provider
        self.audit_service = audit_service
        self.email_service = email_service
        self.settings = settings or get_settings()
        self.password_validator = password_validator or default_password_validator
        self.invitation_repo = DriverInvitationRepository(session)
        self.company_repo = CompanyRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.membership_repo = UserCompanyRepository(session)
        self.driver_profile_repo = DriverProfileRepository(session)

    def build_onboarding_url(self, token: str) -> str:
        return f"{self.settings.external_url.rstrip('/')}{self.settings.onboarding_path}?token={token}"

    async def issue_invitation(
        self,
        actor_token: str | None,
        raw: RawDriverInput,
        metadata: RequestMetadata,
    ) -> IssuedInvitation:
        """Invite a prospective driver by email.

        Args:
            actor_token: Bearer token of the inviting admin.
            raw: Unvalidated driver details; ``rates`` may hold ``hourly_rate``.
            metadata: Request metadata for audit entries.

        Returns:
            The persisted invitation with its token and onboarding URL.

        Raises:
            AuthenticationError: Token missing or invalid.
            AuthorizationError: Actor is not an admin of the company.
            RateLimitExceededError: Actor reached the invitation cap.
            ValidationFailedError: Input has problems.
            ConflictError: Email in use or an active invitation exists.
            DependencyFailureError: The invitation could not be stored.
            EmailDeliveryFailedError: The email could not be sent; the
                invitation was removed.
        """
        passed = await self.guard.preflight(
            actor_token,
            raw,
            self.settings.hourly_rate_ceiling,
            metadata,
            flow="invitation",
        )
        identity, data = passed.identity, passed.data

        existing = await self.invitation_repo.get_pending(data.email, data.organization_id)
        if existing is not None:
            if existing.effective_status is InvitationStatus.PENDING:
                existing_id = existing.id
                await self.guard.reject(
                    identity,
                    "duplicate_invitation",
                    {"company_id": data.organization_id, "email": data.email},
                    metadata,
                    subject_id=existing_id,
                )
                raise ConflictError(
                    DUPLICATE_INVITATION_MESSAGE,
                    details={"invitation_id": existing_id},
                )
            await self.invitation_repo.set_status(existing, InvitationStatus.EXPIRED)
            await self.session.commit()
            logger.info("Stale invitation expired", invitation_id=existing.id)

        company = await self.company_repo.get_by_id(data.organization_id)
        if company is None:
            raise NotFoundError("Company not found")
        company_name = company.name

        token = token_service.generate_token(self.settings.invitation_token_bytes)
        expires_at = datetime.now(timezone.utc) + timedelta(days=self.settings.invitation_expiry_days)
        invitation_id = str(uuid.uuid4())
        invitation = DriverInvitationModel(
            id=invitation_id,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            hourly_rate=data.rates.get("hourly_rate"),
            company_id=data.organization_id,
            invite_token=token,
            status=InvitationStatus.PENDING.value,
            created_by=identity.user_id,
            expires_at=expires_at,
        )

        try:
            await self.invitation_repo.create(invitation)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            await self._creation_failed(identity.user_id, data.email, data.organization_id, e, metadata)
            raise ConflictError(DUPLICATE_INVITATION_MESSAGE) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            await self._creation_failed(identity.user_id, data.email, data.organization_id, e, metadata)
            raise DependencyFailureError("Failed to create invitation") from e

        onboarding_url = self.build_onboarding_url(token)
        try:
            delivery_id = await self.email_service.send_invitation_email(
                to=data.email,
                first_name=data.first_name,
                company_name=company_name,
                onboarding_url=onboarding_url,
                expires_at=expires_at,
            )
        except EmailDeliveryError as e:
            await self._discard_undelivered(invitation_id)
            await self.audit_service.record(
                invitation_id,
                AuditAction.EMAIL_DELIVERY_FAILED,
                identity.user_id,
                {"recipient": data.email, "company_id": data.organization_id, "error": str(e)},
                metadata,
            )
            raise EmailDeliveryFailedError(EMAIL_FAILED_MESSAGE) from e

        await self.audit_service.record(
            invitation_id,
            AuditAction.INVITATION_SENT,
            identity.user_id,
            {
                "recipient": data.email,
                "name": data.full_name,
                "company_id": data.organization_id,
                "delivery_id": delivery_id,
                "expires_at": expires_at,
            },
            metadata,
        )
        logger.info(
            "Driver invitation sent",
            invitation_id=invitation_id,
            company_id=data.organization_id,
            created_by=identity.user_id,
        )
        return IssuedInvitation(
            invitation_id=invitation_id,
            token=token,
            expires_at=expires_at,
            onboarding_url=onboarding_url,
            delivery_id=delivery_id,
        )

    async def _creation_failed(
        self,
        actor_id: str,
        email: str,
        company_id: str,
        error: Exception,
        metadata: RequestMetadata,
    ) -> None:
        logger.error("Failed to create invitation", company_id=company_id, error=str(error))
        await self.audit_service.record(
            None,
            AuditAction.INVITATION_CREATION_FAILED,
            actor_id,
            {"email": email, "company_id": company_id, "error": type(error).__name__},
            metadata,
        )

    async def _discard_undelivered(self, invitation_id: str) -> None:
        try:
            await self.invitation_repo.delete(invitation_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to remove undelivered invitation",
                invitation_id=invitation_id,
                error=str(e),
            )

    async def _load_with_expiry(self, invitation: DriverInvitationModel) -> InvitationStatus:
        """Resolve the effective status, rewriting a lapsed pending row."""
        status = invitation.effective_status
        if status is InvitationStatus.EXPIRED and invitation.status == InvitationStatus.PENDING.value:
            await self.invitation_repo.set_status(invitation, InvitationStatus.EXPIRED)
            await self.session.commit()
        return status

    async def cancel_invitation(
        self,
        actor_token: str | None,
        invitation_id: str,
        metadata: RequestMetadata,
    ) -> DriverInvitation:
        """Cancel a pending invitation.

        Raises:
            AuthenticationError: Token missing or invalid.
            NotFoundError: No such invitation.
            AuthorizationError: Actor is not an admin of its company.
            ConflictError: The invitation is no longer pending.
        """
        identity = await self.guard.authenticate(actor_token, metadata)

        invitation = await self.invitation_repo.get_by_id(invitation_id)
        if invitation is None:
            raise NotFoundError("Invitation not found")

        await self.guard.require_company_admin(
            identity, invitation.company_id, metadata, subject_id=invitation_id
        )

        status = await self._load_with_expiry(invitation)
        if status is not InvitationStatus.PENDING:
            raise ConflictError(
                f"Only pending invitations can be cancelled (current status: {status.value})"
            )

        await self.invitation_repo.set_status(invitation, InvitationStatus.CANCELLED)
        await self.session.commit()

        await self.audit_service.record(
            invitation_id,
            AuditAction.INVITATION_CANCELLED,
            identity.user_id,
            {"email": invitation.email, "company_id": invitation.company_id},
            metadata,
        )
        logger.info("Driver invitation cancelled", invitation_id=invitation_id)
        return self.invitation_repo.to_entity(invitation)

    async def accept_invitation(
        self,
        token: str,
        password: str,
        metadata: RequestMetadata,
    ) -> AcceptedInvitation:
        """Complete onboarding with an invitation token.

        Creates the identity, profile, membership and an active driver
        profile in one transaction.

        Args:
            token: Invitation token from the onboarding link.
            password: Password chosen by the driver.
            metadata: Request metadata for audit entries.

        Returns:
            The created identity and driver profile plus an access token.

        Raises:
            NotFoundError: Unknown token.
            ConflictError: Invitation not pending, or email already in use.
            ValidationFailedError: Password does not meet the policy.
            DependencyFailureError: The account could not be stored.
        """
        invitation = await self.invitation_repo.get_by_token(token)
        if invitation is None:
            raise NotFoundError("Invitation not found")

        status = await self._load_with_expiry(invitation)
        if status is not InvitationStatus.PENDING:
            raise ConflictError(f"Invitation is {status.value}")

        problems = self.password_validator.validate(password)
        if problems:
            raise ValidationFailedError(
                "Password does not meet requirements",
                details=[problem.to_dict() for problem in problems],
            )

        invitation_id = invitation.id
        email = invitation.email
        company_id = invitation.company_id
        now = datetime.now(timezone.utc)
        driver_profile_id = str(uuid.uuid4())

        try:
            user_id = await self.identity_provider.create_account(
                email,
                password,
                metadata={
                    "first_name": invitation.first_name,
                    "last_name": invitation.last_name,
                    "company_id": company_id,
                    "onboarded_via": "invitation",
                },
            )
            await self.profile_repo.create(
                ProfileModel(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    email=email,
                    first_name=invitation.first_name,
                    last_name=invitation.last_name,
                    phone=invitation.phone,
                    user_type="driver",
                    company_id=company_id,
                )
            )
            await self.membership_repo.create(
                UserCompanyModel(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    company_id=company_id,
                    role="driver",
                )
            )
            await self.driver_profile_repo.create(
                DriverProfileModel(
                    id=driver_profile_id,
                    user_id=user_id,
                    company_id=company_id,
                    status="active",
                    hourly_rate=invitation.hourly_rate,
                    requires_onboarding=False,
                    first_login_completed=True,
                    onboarding_progress={
                        "personal_info": True,
                        "account_setup": True,
                        "documents_uploaded": False,
                        "terms_accepted": True,
                    },
                    onboarding_completed_at=now,
                )
            )
            invitation.status = InvitationStatus.ACCEPTED.value
            invitation.accepted_at = now
            invitation.driver_profile_id = driver_profile_id
            await self.session.commit()
        except ConflictError:
            await self.session.rollback()
            raise
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("A user with this email already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to accept invitation", invitation_id=invitation_id, error=str(e))
            raise DependencyFailureError("Failed to complete onboarding") from e

        await self.audit_service.record(
            invitation_id,
            AuditAction.INVITATION_ACCEPTED,
            user_id,
            {"company_id": company_id, "driver_profile_id": driver_profile_id},
            metadata,
        )
        logger.info(
            "Driver invitation accepted",
            invitation_id=invitation_id,
            user_id=user_id,
            company_id=company_id,
        )
        return AcceptedInvitation(
            invitation_id=invitation_id,
            user_id=user_id,
            driver_profile_id=driver_profile_id,
            access_token=self.identity_provider.issue_token(user_id, email),
            expires_in=self.identity_provider.tokens.get_expires_in(),
        )

    async def list_invitations(
        self,
        actor_token: str | None,
        company_id: str,
        status: InvitationStatus | None = None,
        metadata: RequestMetadata = SYSTEM_METADATA,
    ) -> list[DriverInvitation]:
        """List a company's invitations, newest first.

        Raises:
            AuthenticationError: Token missing or invalid.
            AuthorizationError: Actor is not an admin of the company.
        """
        identity = await self.guard.authenticate(actor_token, metadata)
        await self.guard.require_company_admin(identity, company_id, metadata)
        models = await self.invitation_repo.list_by_company(company_id, status)
        return [self.invitation_repo.to_entity(model) for model in models]

    async def expire_stale_invitations(self) -> int:
        """Rewrite every lapsed pending invitation to expired.

        Returns:
            Number of invitations expired.
        """
        try:
            count = await self.invitation_repo.expire_stale()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Invitation expiry sweep failed", error=str(e))
            raise DependencyFailureError("Failed to expire invitations") from e
        logger.info("Expired stale invitations", count=count)
        return count
