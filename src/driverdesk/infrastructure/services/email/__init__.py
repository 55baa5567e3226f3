"""Outbound email: providers, templates and the notification sender."""

from driverdesk.infrastructure.services.email.email_provider import EmailProvider
from driverdesk.infrastructure.services.email.email_service import (
    EmailDeliveryError,
    EmailService,
    build_email_provider,
    get_email_service,
)

__all__ = [
    "EmailDeliveryError",
    "EmailProvider",
    "EmailService",
    "build_email_provider",
    "get_email_service",
]
