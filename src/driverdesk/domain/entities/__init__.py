"""Domain entities for DriverDesk.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from driverdesk.domain.entities.deletion_summary import DeletionSummary
from driverdesk.domain.entities.identity import AuthenticatedIdentity
from driverdesk.domain.entities.invitation import (
    DriverInvitation,
    InvitationStatus,
    as_utc,
    effective_invitation_status,
)
from driverdesk.domain.entities.onboarding import (
    AcceptedInvitation,
    IssuedInvitation,
    ProvisionedDriver,
)
from driverdesk.domain.entities.request_metadata import (
    SYSTEM_METADATA,
    RequestMetadata,
)

__all__ = [
    "AcceptedInvitation",
    "AuthenticatedIdentity",
    "DeletionSummary",
    "DriverInvitation",
    "InvitationStatus",
    "IssuedInvitation",
    "ProvisionedDriver",
    "RequestMetadata",
    "SYSTEM_METADATA",
    "as_utc",
    "effective_invitation_status",
]
