"""Domain services for DriverDesk.

Services hold the onboarding and deprovisioning workflows. Collaborators
(sessions, identity provider, email service) are passed in explicitly.
"""

from driverdesk.domain.services.driver_deprovisioning_service import (
    DriverDeprovisioningService,
)
from driverdesk.domain.services.driver_input_validator import (
    DriverInputValidationResult,
    DriverInputValidator,
    NormalizedDriverInput,
    RawDriverInput,
    ValidationIssue,
    sanitize_input,
)
from driverdesk.domain.services.driver_invitation_service import DriverInvitationService
from driverdesk.domain.services.driver_provisioning_service import DriverProvisioningService
from driverdesk.domain.services.invitation_rate_limiter import (
    InvitationRateLimiter,
    RateLimitDecision,
)
from driverdesk.domain.services.onboarding_guard import GuardPass, OnboardingGuard
from driverdesk.domain.services.password_validator import (
    PasswordValidator,
    default_password_validator,
)
from driverdesk.domain.services.security_audit_service import (
    AuditAction,
    SecurityAuditService,
)

__all__ = [
    "AuditAction",
    "DriverDeprovisioningService",
    "DriverInputValidationResult",
    "DriverInputValidator",
    "DriverInvitationService",
    "DriverProvisioningService",
    "GuardPass",
    "InvitationRateLimiter",
    "NormalizedDriverInput",
    "OnboardingGuard",
    "PasswordValidator",
    "RateLimitDecision",
    "RawDriverInput",
    "SecurityAuditService",
    "ValidationIssue",
    "default_password_validator",
    "sanitize_input",
]
