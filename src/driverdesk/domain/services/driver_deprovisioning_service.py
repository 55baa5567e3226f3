"""Driver deprovisioning.

Removes a driver profile and everything that references it, table by
table in dependency order. Each dependent table is its own committed unit
of work: a failure on one table is recorded and the cascade moves on. The
driver profile delete itself is not best-effort.

The login identity is only removed when nothing else needs it: no
membership in another company, no admin role anywhere, and no other
driver profile.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.deletion_summary import DeletionSummary
from driverdesk.domain.entities.request_metadata import SYSTEM_METADATA, RequestMetadata
from driverdesk.domain.errors import (
    AuthorizationError,
    ConflictError,
    DependencyFailureError,
    NotFoundError,
)
from driverdesk.domain.services.security_audit_service import (
    SYSTEM_ACTOR,
    AuditAction,
    SecurityAuditService,
)
from driverdesk.infrastructure.auth.identity_provider import IdentityProvider
from driverdesk.infrastructure.persistence.models import DEPENDENT_RECORD_MODELS
from driverdesk.infrastructure.persistence.repositories import (
    DriverInvitationRepository,
    DriverProfileRepository,
    DriverRecordRepository,
    ProfileRepository,
    UserCompanyRepository,
)

logger = get_logger(__name__)

CASCADE_TABLES = tuple(model.__tablename__ for model in DEPENDENT_RECORD_MODELS)
SUMMARY_TABLES = CASCADE_TABLES + ("driver_profiles", "user_companies", "profiles")

ACTIVE_SHIFT_MESSAGE = (
    "Cannot delete driver with active daily logs. "
    "Please complete or cancel their current shift first."
)
REMOVED_MESSAGE = "Driver deleted successfully. User account also removed."
PRESERVED_MESSAGE = "Driver deleted successfully. User account preserved due to other roles."
REMOVAL_FAILED_MESSAGE = "Driver deleted successfully. User account could not be removed."


class DriverDeprovisioningService:
    """Deletes a driver and, when safe, the login identity behind it."""

    def __init__(
        self,
        session: AsyncSession,
        identity_provider: IdentityProvider,
        audit_service: SecurityAuditService,
        record_repo: DriverRecordRepository | None = None,
    ) -> None:
        """Initialize the deprovisioning service.

        Args:
            session: SQLAlchemy async session.
            identity_provider: Removes the login identity.
            audit_service: Security audit trail.
            record_repo: Store for driver-dependent records.
        """
        self.session = session
        self.identity_provider = identity_provider
        self.audit_service = audit_service
        self.record_repo = record_repo or DriverRecordRepository(session)
        self.driver_profile_repo = DriverProfileRepository(session)
        self.invitation_repo = DriverInvitationRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.membership_repo = UserCompanyRepository(session)

    async def deprovision(
        self,
        driver_profile_id: str,
        expected_organization_id: str | None = None,
        actor_id: str | None = None,
        metadata: RequestMetadata | None = None,
    ) -> DeletionSummary:
        """Delete a driver profile and its dependent records.

        Args:
            driver_profile_id: Driver profile to delete.
            expected_organization_id: When given, the driver must belong to
                this company.
            actor_id: Identity performing the deletion.
            metadata: Request metadata for audit entries.

        Returns:
            Per-table counts, whether the identity was removed, and any
            tables whose deletion failed.

        Raises:
            NotFoundError: No such driver profile.
            AuthorizationError: Driver belongs to another company.
            ConflictError: Driver has a shift in progress; nothing deleted.
            DependencyFailureError: The driver profile could not be deleted.
        """
        metadata = metadata or SYSTEM_METADATA
        actor = actor_id or SYSTEM_ACTOR

        driver_profile = await self.driver_profile_repo.get_by_id(driver_profile_id)
        if driver_profile is None:
            raise NotFoundError("Driver not found")
        user_id = driver_profile.user_id
        company_id = driver_profile.company_id

        if expected_organization_id is not None and expected_organization_id != company_id:
            await self.audit_service.record(
                driver_profile_id,
                AuditAction.UNAUTHORIZED_DEPROVISION_ATTEMPT,
                actor,
                {"attempted_company_id": expected_organization_id, "actual_company_id": company_id},
                metadata,
            )
            raise AuthorizationError("Driver does not belong to this company")

        if await self.record_repo.has_active_daily_log(driver_profile_id):
            raise ConflictError(ACTIVE_SHIFT_MESSAGE)

        summary = DeletionSummary.for_tables(SUMMARY_TABLES)
        await self._delete_dependents(driver_profile_id, summary)

        try:
            await self.invitation_repo.detach_driver_profile(driver_profile_id)
            summary.deleted_records["driver_profiles"] = await self.driver_profile_repo.delete(
                driver_profile_id
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Driver profile deletion failed",
                driver_profile_id=driver_profile_id,
                error=str(e),
            )
            progress = {
                "deleted_records": dict(summary.deleted_records),
                "failed_tables": dict(summary.failed_tables),
            }
            await self.audit_service.record(
                driver_profile_id,
                AuditAction.DRIVER_DEPROVISION_FAILED,
                actor,
                {"company_id": company_id, "user_id": user_id, **progress},
                metadata,
            )
            raise DependencyFailureError("Failed to delete driver profile", details=progress) from e

        if await self._identity_needed_elsewhere(user_id, company_id):
            summary.deleted_records["user_companies"] = await self._leave_company(
                user_id, company_id, summary
            )
            summary.message = PRESERVED_MESSAGE
        else:
            await self._remove_identity(user_id, summary)
            summary.message = REMOVED_MESSAGE if summary.auth_user_deleted else REMOVAL_FAILED_MESSAGE

        await self.audit_service.record(
            driver_profile_id,
            AuditAction.DRIVER_DEPROVISIONED,
            actor,
            {"company_id": company_id, "user_id": user_id, **summary.to_dict()},
            metadata,
        )
        logger.info(
            "Driver deprovisioned",
            driver_profile_id=driver_profile_id,
            company_id=company_id,
            auth_user_deleted=summary.auth_user_deleted,
            partial_failure=summary.partial_failure,
        )
        return summary

    async def _delete_dependents(self, driver_profile_id: str, summary: DeletionSummary) -> None:
        for model in DEPENDENT_RECORD_MODELS:
            table = model.__tablename__
            try:
                count = await self.record_repo.delete_for_driver(model, driver_profile_id)
                await self.session.commit()
            except SQLAlchemyError as e:
                await self.session.rollback()
                summary.failed_tables[table] = f"Delete failed ({type(e).__name__})"
                logger.warning(
                    "Dependent record deletion failed",
                    table=table,
                    driver_profile_id=driver_profile_id,
                    error=str(e),
                )
                continue
            summary.deleted_records[table] = count

    async def _identity_needed_elsewhere(self, user_id: str, company_id: str) -> bool:
        memberships = await self.membership_repo.list_by_user(user_id)
        if any(m.company_id != company_id or m.role == "admin" for m in memberships):
            return True
        profile = await self.profile_repo.get_by_user_id(user_id)
        if profile is not None and profile.user_type == "admin":
            return True
        return await self.driver_profile_repo.exists_for_user(user_id)

    async def _leave_company(self, user_id: str, company_id: str, summary: DeletionSummary) -> int:
        """Drop the driver's membership in this company, keeping admin roles."""
        membership = await self.membership_repo.get(user_id, company_id)
        if membership is None or membership.role == "admin":
            return 0
        try:
            count = await self.membership_repo.delete(user_id, company_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            summary.failed_tables["user_companies"] = f"Delete failed ({type(e).__name__})"
            logger.warning("Membership deletion failed", user_id=user_id, error=str(e))
            return 0
        return count

    async def _remove_identity(self, user_id: str, summary: DeletionSummary) -> None:
        try:
            memberships = await self.membership_repo.delete_by_user_id(user_id)
            profiles = await self.profile_repo.delete_by_user_id(user_id)
            account_deleted = await self.identity_provider.delete_account(user_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            summary.failed_tables["users"] = f"Delete failed ({type(e).__name__})"
            logger.error("Identity removal failed", user_id=user_id, error=str(e))
            return
        summary.deleted_records["user_companies"] = memberships
        summary.deleted_records["profiles"] = profiles
        summary.auth_user_deleted = account_deleted
