"""Pytest configuration for all tests."""

import uuid
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from driverdesk.domain.services import (
    DriverDeprovisioningService,
    DriverInputValidator,
    DriverInvitationService,
    DriverProvisioningService,
    InvitationRateLimiter,
    OnboardingGuard,
    SecurityAuditService,
)
from driverdesk.infrastructure.auth import IdentityProvider, hash_password, jwt_service
from driverdesk.infrastructure.persistence.database import Base
from driverdesk.infrastructure.persistence.models import (
    CompanyModel,
    DriverProfileModel,
    ProfileModel,
    UserCompanyModel,
    UserModel,
)
from driverdesk.infrastructure.services.email import EmailService

ADMIN_PASSWORD = "AdminPass123"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database with foreign keys enforced.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def make_company(db_session: AsyncSession):
    """Factory creating a committed company."""

    async def _make(name: str = "Acme Deliveries") -> CompanyModel:
        company = CompanyModel(id=str(uuid.uuid4()), name=name)
        db_session.add(company)
        await db_session.commit()
        return company

    return _make


@pytest_asyncio.fixture
async def company(make_company) -> CompanyModel:
    return await make_company()


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory creating a committed identity with a profile and membership."""

    async def _make(
        company_id: str,
        role: str = "admin",
        email: str | None = None,
        password: str = ADMIN_PASSWORD,
    ) -> UserModel:
        user = UserModel(
            id=str(uuid.uuid4()),
            email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            is_active=True,
        )
        db_session.add(user)
        await db_session.flush()
        db_session.add(
            ProfileModel(
                id=str(uuid.uuid4()),
                user_id=user.id,
                email=user.email,
                first_name="Test",
                last_name="User",
                user_type=role,
                company_id=company_id,
            )
        )
        db_session.add(
            UserCompanyModel(
                id=str(uuid.uuid4()),
                user_id=user.id,
                company_id=company_id,
                role=role,
            )
        )
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def admin_user(make_user, company) -> UserModel:
    return await make_user(company.id, role="admin", email="admin@acme.example.com")


@pytest.fixture
def admin_token(admin_user: UserModel) -> str:
    return jwt_service.create_access_token(user_id=admin_user.id, email=admin_user.email)


@pytest.fixture
def make_driver(db_session: AsyncSession, make_user):
    """Factory creating a driver identity plus an active driver profile."""

    async def _make(company_id: str, user: UserModel | None = None) -> DriverProfileModel:
        if user is None:
            user = await make_user(company_id, role="driver")
        driver_profile = DriverProfileModel(
            id=str(uuid.uuid4()),
            user_id=user.id,
            company_id=company_id,
            status="active",
        )
        db_session.add(driver_profile)
        await db_session.commit()
        return driver_profile

    return _make


@pytest.fixture
def email_service() -> MagicMock:
    """Email service double that reports every message as delivered."""
    service = MagicMock(spec=EmailService)
    service.send_invitation_email = AsyncMock(return_value="msg-invite-1")
    service.send_credentials_email = AsyncMock(return_value="msg-credentials-1")
    return service


@pytest.fixture
def identity_provider(db_session: AsyncSession) -> IdentityProvider:
    return IdentityProvider(db_session)


@pytest.fixture
def audit_service(db_session: AsyncSession) -> SecurityAuditService:
    return SecurityAuditService(db_session)


@pytest.fixture
def rate_limiter(db_session: AsyncSession) -> InvitationRateLimiter:
    return InvitationRateLimiter(db_session, max_per_window=10, window_seconds=3600)


@pytest.fixture
def guard(db_session, identity_provider, rate_limiter, audit_service) -> OnboardingGuard:
    return OnboardingGuard(
        session=db_session,
        identity_provider=identity_provider,
        rate_limiter=rate_limiter,
        audit_service=audit_service,
        validator=DriverInputValidator(),
    )


@pytest.fixture
def invitation_service(
    db_session, guard, identity_provider, audit_service, email_service
) -> DriverInvitationService:
    return DriverInvitationService(
        session=db_session,
        guard=guard,
        identity_provider=identity_provider,
        audit_service=audit_service,
        email_service=email_service,
    )


@pytest.fixture
def provisioning_service(
    db_session, guard, identity_provider, audit_service, email_service
) -> DriverProvisioningService:
    return DriverProvisioningService(
        session=db_session,
        guard=guard,
        identity_provider=identity_provider,
        audit_service=audit_service,
        email_service=email_service,
    )


@pytest.fixture
def deprovisioning_service(
    db_session, identity_provider, audit_service
) -> DriverDeprovisioningService:
    return DriverDeprovisioningService(db_session, identity_provider, audit_service)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, email_service: MagicMock
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and email dependencies."""
    from driverdesk.infrastructure.api.app import app
    from driverdesk.infrastructure.api.dependencies import get_email_service
    from driverdesk.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_email_service] = lambda: email_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
