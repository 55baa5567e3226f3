"""Infrastructure layer - external dependencies and implementations.

This layer contains the database adapters (SQLAlchemy), the HTTP API
(FastAPI), identity and token handling, and outbound email delivery.
"""

from driverdesk.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    close_database,
    get_db_manager,
    get_db_session,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "get_db_session",
    "init_database",
    "close_database",
]
