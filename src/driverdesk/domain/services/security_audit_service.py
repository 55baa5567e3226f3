"""Security audit trail for onboarding and deprovisioning actions.

Entries are committed before ``record`` returns. A write that keeps failing
never fails the caller's operation: the entry is logged at error level
instead and ``record`` returns False.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.config import get_settings
from driverdesk.core.logging import get_logger
from driverdesk.domain.entities.request_metadata import SYSTEM_METADATA, RequestMetadata
from driverdesk.infrastructure.persistence.models import SecurityAuditLogModel
from driverdesk.infrastructure.persistence.repositories import SecurityAuditRepository

logger = get_logger(__name__)

ANONYMOUS_ACTOR = "anonymous"
SYSTEM_ACTOR = "system"


class AuditAction(str, Enum):
    """Action names written to the security audit log."""

    UNAUTHENTICATED_INVITE_ATTEMPT = "UNAUTHENTICATED_INVITE_ATTEMPT"
    UNAUTHORIZED_INVITE_ATTEMPT = "UNAUTHORIZED_INVITE_ATTEMPT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVITATION_REJECTED = "INVITATION_REJECTED"
    INVITATION_CREATION_FAILED = "INVITATION_CREATION_FAILED"
    INVITATION_SENT = "INVITATION_SENT"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    INVITATION_CANCELLED = "INVITATION_CANCELLED"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    DRIVER_ACCOUNT_PROVISIONED = "DRIVER_ACCOUNT_PROVISIONED"
    CREDENTIALS_EMAIL_FAILED = "CREDENTIALS_EMAIL_FAILED"
    CREDENTIALS_RESENT = "CREDENTIALS_RESENT"
    UNAUTHORIZED_DEPROVISION_ATTEMPT = "UNAUTHORIZED_DEPROVISION_ATTEMPT"
    DRIVER_DEPROVISIONED = "DRIVER_DEPROVISIONED"
    DRIVER_DEPROVISION_FAILED = "DRIVER_DEPROVISION_FAILED"


def _jsonable(value: Any) -> Any:
    """Convert audit details into JSON-storable values."""
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class SecurityAuditService:
    """Writes append-only security audit entries."""

    def __init__(
        self,
        session: AsyncSession,
        repository: SecurityAuditRepository | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """Initialize the audit service.

        Args:
            session: SQLAlchemy async session. Callers must not hold
                uncommitted work in it when recording.
            repository: Record store, defaults to one over ``session``.
            max_attempts: Write attempts before giving up.
        """
        self.session = session
        self.repository = repository or SecurityAuditRepository(session)
        self.max_attempts = max_attempts or get_settings().audit_write_attempts

    async def record(
        self,
        subject_id: str | None,
        action: AuditAction | str,
        actor_id: str | None,
        details: dict[str, Any] | None = None,
        metadata: RequestMetadata | None = None,
    ) -> bool:
        """Record one audit entry.

        Args:
            subject_id: Record the action concerned, if any.
            action: Audit action name.
            actor_id: Identity that acted; None is recorded as "anonymous".
            details: Structured context.
            metadata: Client address and user agent of the request.

        Returns:
            True if the entry was stored, False if every attempt failed.
        """
        action_name = action.value if isinstance(action, AuditAction) else str(action)
        performed_by = actor_id or ANONYMOUS_ACTOR
        metadata = metadata or SYSTEM_METADATA
        payload = _jsonable(details or {})

        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.repository.create(
                    SecurityAuditLogModel(
                        subject_id=subject_id,
                        action=action_name,
                        performed_by=performed_by,
                        details=payload,
                        ip_address=metadata.ip_address,
                        user_agent=metadata.user_agent,
                    )
                )
                await self.session.commit()
                return True
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.warning(
                    "Security audit write failed",
                    action=action_name,
                    attempt=attempt,
                    error=str(e),
                )

        logger.error(
            "Security audit entry could not be stored",
            action=action_name,
            subject_id=subject_id,
            performed_by=performed_by,
            details=payload,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
        )
        return False
