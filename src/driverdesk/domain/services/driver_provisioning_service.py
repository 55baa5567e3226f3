"""Direct driver provisioning.

The second onboarding entry point: an admin creates the driver account
immediately with a temporary password instead of sending an invitation.
The account is created in one transaction; the credentials email is sent
afterwards and its failure does not undo the account.
"""

import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.config import Settings, get_settings
from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.onboarding import ProvisionedDriver
from driverdesk.domain.entities.request_metadata import RequestMetadata
from driverdesk.domain.errors import (
    ConflictError,
    DependencyFailureError,
    EmailDeliveryFailedError,
    NotFoundError,
)
from driverdesk.domain.services.driver_input_validator import RawDriverInput
from driverdesk.domain.services.onboarding_guard import OnboardingGuard
from driverdesk.domain.services.security_audit_service import AuditAction, SecurityAuditService
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.persistence.models import (
    DriverProfileModel,
    ProfileModel,
    UserCompanyModel,
)
from driverdesk.infrastructure.persistence.repositories import (
    CompanyRepository,
    DriverProfileRepository,
    ProfileRepository,
    UserCompanyRepository,
    UserRepository,
)
from driverdesk.infrastructure.services.email import EmailDeliveryError, EmailService
from driverdesk.infrastructure.services.token_service import token_service

logger = get_logger(__name__)

EMAIL_NOT_SENT_WARNING = (
    "Account created but the credentials email could not be sent. "
    "Share the temporary password with the driver manually."
)


class DriverProvisioningService:
    """Creates driver accounts directly and re-sends their credentials."""

    def __init__(
        self,
        session: AsyncSession,
        guard: OnboardingGuard,
        identity_provider: IdentityProvider,
        audit_service: SecurityAuditService,
        email_service: EmailService,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the provisioning service.

        Args:
            session: SQLAlchemy async session.
            guard: Shared onboarding preflight.
            identity_provider: Creates identities and rotates credentials.
            audit_service: Security audit trail.
            email_service: Notification sender.
            settings: Application settings.
        """
        self.session = session
        self.guard = guard
        self.identity_provider = identity_provider
        self.audit_service = audit_service
        self.email_service = email_service
        self.settings = settings or get_settings()
        self.company_repo = CompanyRepository(session)
        self.user_repo = UserRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.membership_repo = UserCompanyRepository(session)
        self.driver_profile_repo = DriverProfileRepository(session)

    async def provision_driver(
        self,
        actor_token: str | None,
        raw: RawDriverInput,
        metadata: RequestMetadata,
    ) -> ProvisionedDriver:
        """Create a driver account with a temporary password.

        Args:
            actor_token: Bearer token of the acting admin.
            raw: Unvalidated driver details; ``rates`` may hold
                ``parcel_rate`` and ``cover_rate``.
            metadata: Request metadata for audit entries.

        Returns:
            The created account. ``email_sent`` is False, with a warning,
            when the credentials email could not be delivered.

        Raises:
            AuthenticationError: Token missing or invalid.
            AuthorizationError: Actor is not an admin of the company.
            RateLimitExceededError: Actor reached the onboarding cap.
            ValidationFailedError: Input has problems.
            ConflictError: An identity already holds the email.
            DependencyFailureError: The account could not be stored.
        """
        passed = await self.guard.preflight(
            actor_token,
            raw,
            self.settings.per_unit_rate_ceiling,
            metadata,
            flow="direct_provisioning",
        )
        identity, data = passed.identity, passed.data
        company_id = data.organization_id

        company = await self.company_repo.get_by_id(company_id)
        if company is None:
            raise NotFoundError("Company not found")
        company_name = company.name

        parcel_rate = data.rates.get("parcel_rate", self.settings.default_parcel_rate)
        cover_rate = data.rates.get("cover_rate", self.settings.default_cover_rate)
        temporary_password = token_service.generate_temporary_password(
            self.settings.temporary_password_length
        )
        driver_profile_id = str(uuid.uuid4())

        try:
            user_id = await self.identity_provider.create_account(
                data.email,
                temporary_password,
                metadata={
                    "first_name": data.first_name,
                    "last_name": data.last_name,
                    "company_id": company_id,
                    "created_by": identity.user_id,
                    "onboarded_via": "direct_provisioning",
                },
            )
            await self.profile_repo.create(
                ProfileModel(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    email=data.email,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    phone=data.phone,
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
                    status="pending",
                    parcel_rate=parcel_rate,
                    cover_rate=cover_rate,
                    requires_onboarding=True,
                    first_login_completed=False,
                    onboarding_progress={
                        "personal_info": False,
                        "account_setup": False,
                        "documents_uploaded": False,
                        "terms_accepted": False,
                    },
                )
            )
            await self.session.commit()
        except ConflictError:
            await self.session.rollback()
            raise
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("A user with this email already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to provision driver", company_id=company_id, error=str(e))
            raise DependencyFailureError("Failed to create driver account") from e

        email_sent = True
        warning = None
        delivery_id = None
        try:
            delivery_id = await self.email_service.send_credentials_email(
                to=data.email,
                first_name=data.first_name,
                company_name=company_name,
                temporary_password=temporary_password,
            )
        except EmailDeliveryError as e:
            email_sent = False
            warning = EMAIL_NOT_SENT_WARNING
            await self.audit_service.record(
                driver_profile_id,
                AuditAction.CREDENTIALS_EMAIL_FAILED,
                identity.user_id,
                {"recipient": data.email, "company_id": company_id, "error": str(e)},
                metadata,
            )

        await self.audit_service.record(
            driver_profile_id,
            AuditAction.DRIVER_ACCOUNT_PROVISIONED,
            identity.user_id,
            {
                "user_id": user_id,
                "email": data.email,
                "name": data.full_name,
                "company_id": company_id,
                "parcel_rate": parcel_rate,
                "cover_rate": cover_rate,
                "email_sent": email_sent,
                "delivery_id": delivery_id,
            },
            metadata,
        )
        logger.info(
            "Driver account provisioned",
            driver_profile_id=driver_profile_id,
            company_id=company_id,
            email_sent=email_sent,
        )
        return ProvisionedDriver(
            user_id=user_id,
            driver_profile_id=driver_profile_id,
            temporary_password=temporary_password,
            email_sent=email_sent,
            warning=warning,
        )

    async def resend_credentials(
        self,
        actor_token: str | None,
        driver_profile_id: str,
        metadata: RequestMetadata,
    ) -> str:
        """Rotate a driver's temporary password and email it again.

        The rotation is only committed once the email was handed over, so
        the previous password stays valid when delivery fails.

        Returns:
            Provider delivery ID.

        Raises:
            AuthenticationError: Token missing or invalid.
            NotFoundError: No such driver.
            AuthorizationError: Actor is not an admin of the driver's company.
            EmailDeliveryFailedError: The email could not be sent.
        """
        identity = await self.guard.authenticate(actor_token, metadata, flow="resend_credentials")

        driver_profile = await self.driver_profile_repo.get_by_id(driver_profile_id)
        if driver_profile is None:
            raise NotFoundError("Driver not found")
        company_id = driver_profile.company_id
        await self.guard.require_company_admin(
            identity,
            company_id,
            metadata,
            subject_id=driver_profile_id,
            flow="resend_credentials",
        )

        user = await self.user_repo.get_by_id(driver_profile.user_id)
        if user is None:
            raise NotFoundError("Driver account not found")
        user_id, email = user.id, user.email
        profile = await self.profile_repo.get_by_user_id(user_id)
        first_name = profile.first_name if profile and profile.first_name else "there"
        company = await self.company_repo.get_by_id(company_id)
        company_name = company.name if company else ""

        temporary_password = token_service.generate_temporary_password(
            self.settings.temporary_password_length
        )
        try:
            await self.identity_provider.set_credential(user_id, temporary_password)
            driver_profile.requires_onboarding = True
            driver_profile.first_login_completed = False
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to rotate credentials", user_id=user_id, error=str(e))
            raise DependencyFailureError("Failed to reset driver credentials") from e

        try:
            delivery_id = await self.email_service.send_credentials_email(
                to=email,
                first_name=first_name,
                company_name=company_name,
                temporary_password=temporary_password,
            )
        except EmailDeliveryError as e:
            await self.session.rollback()
            await self.audit_service.record(
                driver_profile_id,
                AuditAction.CREDENTIALS_EMAIL_FAILED,
                identity.user_id,
                {"recipient": email, "company_id": company_id, "error": str(e), "resend": True},
                metadata,
            )
            raise EmailDeliveryFailedError(
                "Failed to send credentials email. The previous password is still valid."
            ) from e

        await self.session.commit()
        await self.audit_service.record(
            driver_profile_id,
            AuditAction.CREDENTIALS_RESENT,
            identity.user_id,
            {"recipient": email, "company_id": company_id, "delivery_id": delivery_id},
            metadata,
        )
        logger.info("Driver credentials resent", driver_profile_id=driver_profile_id)
        return delivery_id
