"""SQLAlchemy models for DriverDesk tables.

All models inherit from the Base class defined in database.py and are
automatically created on application startup in development mode.
"""

from driverdesk.infrastructure.persistence.models.company import CompanyModel
from driverdesk.infrastructure.persistence.models.driver_invitation import (
    DriverInvitationModel,
)
from driverdesk.infrastructure.persistence.models.driver_profile import DriverProfileModel
from driverdesk.infrastructure.persistence.models.driver_records import (
    DEPENDENT_RECORD_MODELS,
    DailyLogModel,
    DriverAchievementModel,
    DriverEarningModel,
    DriverExpenseModel,
    DriverInvoiceModel,
    DriverRatingModel,
    EodReportModel,
    IncidentReportModel,
    PaymentModel,
    RouteFeedbackModel,
    ScheduleModel,
    SodLogModel,
    VehicleCheckModel,
)
from driverdesk.infrastructure.persistence.models.invitation_rate_limit import (
    InvitationRateLimitModel,
)
from driverdesk.infrastructure.persistence.models.profile import ProfileModel, UserCompanyModel
from driverdesk.infrastructure.persistence.models.security_audit_log import (
    SecurityAuditLogModel,
)
from driverdesk.infrastructure.persistence.models.user import UserModel

__all__ = [
    "DEPENDENT_RECORD_MODELS",
    "CompanyModel",
    "DailyLogModel",
    "DriverAchievementModel",
    "DriverEarningModel",
    "DriverExpenseModel",
    "DriverInvitationModel",
    "DriverInvoiceModel",
    "DriverProfileModel",
    "DriverRatingModel",
    "EodReportModel",
    "IncidentReportModel",
    "InvitationRateLimitModel",
    "PaymentModel",
    "ProfileModel",
    "RouteFeedbackModel",
    "ScheduleModel",
    "SecurityAuditLogModel",
    "SodLogModel",
    "UserCompanyModel",
    "UserModel",
    "VehicleCheckModel",
]
