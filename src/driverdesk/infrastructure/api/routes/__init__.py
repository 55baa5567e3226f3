"""API routes for DriverDesk."""

from driverdesk.infrastructure.api.routes.auth_router import router as auth_router
from driverdesk.infrastructure.api.routes.driver_invitations_router import (
    router as driver_invitations_router,
)
from driverdesk.infrastructure.api.routes.drivers_router import router as drivers_router

__all__ = [
    "auth_router",
    "driver_invitations_router",
    "drivers_router",
]
