"""DriverDesk - driver lifecycle management for delivery fleets.

Secure driver invitation and onboarding, direct account provisioning,
and cascading driver deprovisioning with an append-only security audit trail.
"""

__version__ = "0.1.0"

from driverdesk.infrastructure.api.app import app

__all__ = ["app", "__version__"]
