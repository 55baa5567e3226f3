"""Persistence repositories for database operations."""

from driverdesk.infrastructure.persistence.repositories.company_repository import (
    CompanyRepository,
)
from driverdesk.infrastructure.persistence.repositories.driver_invitation_repository import (
    DriverInvitationRepository,
)
from driverdesk.infrastructure.persistence.repositories.driver_profile_repository import (
    DriverProfileRepository,
)
from driverdesk.infrastructure.persistence.repositories.driver_record_repository import (
    DriverRecordRepository,
)
from driverdesk.infrastructure.persistence.repositories.invitation_rate_limit_repository import (
    InvitationRateLimitRepository,
)
from driverdesk.infrastructure.persistence.repositories.profile_repository import (
    ProfileRepository,
    UserCompanyRepository,
)
from driverdesk.infrastructure.persistence.repositories.security_audit_repository import (
    SecurityAuditRepository,
)
from driverdesk.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "CompanyRepository",
    "DriverInvitationRepository",
    "DriverProfileRepository",
    "DriverRecordRepository",
    "InvitationRateLimitRepository",
    "ProfileRepository",
    "SecurityAuditRepository",
    "UserCompanyRepository",
    "UserRepository",
]
