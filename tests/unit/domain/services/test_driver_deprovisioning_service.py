"""Unit tests for DriverDeprovisioningService."""

import uuid
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from driverdesk.domain.errors import (
    AuthorizationError,
    ConflictError,
    DependencyFailureError,
    NotFoundError,
)
from driverdesk.domain.services import DriverDeprovisioningService
from driverdesk.domain.services.driver_deprovisioning_service import (
    ACTIVE_SHIFT_MESSAGE,
    PRESERVED_MESSAGE,
    REMOVAL_FAILED_MESSAGE,
    REMOVED_MESSAGE,
    SUMMARY_TABLES,
)
from driverdesk.infrastructure.persistence.models import (
    DailyLogModel,
    DriverExpenseModel,
    DriverInvitationModel,
    DriverProfileModel,
    PaymentModel,
    ScheduleModel,
    UserCompanyModel,
    UserModel,
    VehicleCheckModel,
)
from driverdesk.infrastructure.persistence.repositories import (
    DriverRecordRepository,
    SecurityAuditRepository,
)


def _id() -> str:
    return str(uuid.uuid4())


async def add_records(db_session, driver_id: str) -> None:
    db_session.add_all(
        [
            DailyLogModel(id=_id(), driver_id=driver_id, log_date=date(2026, 5, 1), status="completed"),
            DailyLogModel(id=_id(), driver_id=driver_id, log_date=date(2026, 5, 2), status="cancelled"),
            VehicleCheckModel(id=_id(), driver_id=driver_id, passed=True),
            DriverExpenseModel(id=_id(), driver_id=driver_id, amount=12),
            PaymentModel(id=_id(), driver_id=driver_id, amount=300),
        ]
    )
    await db_session.commit()


async def memberships_of(db_session, user_id: str) -> list[UserCompanyModel]:
    result = await db_session.execute(
        select(UserCompanyModel).where(UserCompanyModel.user_id == user_id)
    )
    return list(result.scalars().all())


def flaky_record_repo(db_session, failing_model) -> DriverRecordRepository:
    record_repo = DriverRecordRepository(db_session)
    real_delete = record_repo.delete_for_driver

    async def delete_for_driver(model, driver_profile_id):
        if model is failing_model:
            raise OperationalError("DELETE", {}, Exception("database is locked"))
        return await real_delete(model, driver_profile_id)

    record_repo.delete_for_driver = AsyncMock(side_effect=delete_for_driver)
    return record_repo


@pytest.mark.asyncio
async def test_sole_company_driver_is_removed_entirely(
    deprovisioning_service, db_session, make_driver, company, admin_user
):
    admin_id = admin_user.id
    driver = await make_driver(company.id)
    driver_id, user_id = driver.id, driver.user_id
    await add_records(db_session, driver_id)

    summary = await deprovisioning_service.deprovision(
        driver_id, expected_organization_id=company.id, actor_id=admin_id
    )

    assert summary.auth_user_deleted
    assert summary.message == REMOVED_MESSAGE
    assert not summary.partial_failure
    assert set(summary.deleted_records) == set(SUMMARY_TABLES)
    assert summary.deleted_records["daily_logs"] == 2
    assert summary.deleted_records["vehicle_checks"] == 1
    assert summary.deleted_records["driver_expenses"] == 1
    assert summary.deleted_records["payments"] == 1
    assert summary.deleted_records["schedules"] == 0
    assert summary.deleted_records["driver_profiles"] == 1
    assert summary.deleted_records["user_companies"] == 1
    assert summary.deleted_records["profiles"] == 1

    db_session.expire_all()
    assert await db_session.get(UserModel, user_id) is None
    assert await db_session.get(DriverProfileModel, driver_id) is None

    entry = (await SecurityAuditRepository(db_session).list_entries())[0]
    assert entry.action == "DRIVER_DEPROVISIONED"
    assert entry.performed_by == admin_id


@pytest.mark.asyncio
async def test_identity_with_other_company_is_preserved(
    deprovisioning_service, db_session, make_driver, make_company, company
):
    company_id = company.id
    driver = await make_driver(company_id)
    driver_id, user_id = driver.id, driver.user_id
    other = await make_company("Other Fleet")
    other_id = other.id
    db_session.add(UserCompanyModel(id=_id(), user_id=user_id, company_id=other_id, role="driver"))
    await db_session.commit()

    summary = await deprovisioning_service.deprovision(driver_id, expected_organization_id=company_id)

    assert not summary.auth_user_deleted
    assert summary.message == PRESERVED_MESSAGE
    assert summary.deleted_records["user_companies"] == 1
    assert summary.deleted_records["profiles"] == 0

    db_session.expire_all()
    assert await db_session.get(UserModel, user_id) is not None
    assert [m.company_id for m in await memberships_of(db_session, user_id)] == [other_id]


@pytest.mark.asyncio
async def test_admin_identity_is_preserved(
    deprovisioning_service, db_session, make_driver, admin_user, company
):
    admin_id = admin_user.id
    driver = await make_driver(company.id, user=admin_user)

    summary = await deprovisioning_service.deprovision(driver.id, expected_organization_id=company.id)

    assert not summary.auth_user_deleted
    assert summary.message == PRESERVED_MESSAGE
    assert summary.deleted_records["user_companies"] == 0
    db_session.expire_all()
    assert [m.role for m in await memberships_of(db_session, admin_id)] == ["admin"]


@pytest.mark.asyncio
async def test_active_shift_blocks_deletion(deprovisioning_service, db_session, make_driver, company):
    company_id = company.id
    driver = await make_driver(company_id)
    driver_id = driver.id
    await add_records(db_session, driver_id)
    db_session.add(
        DailyLogModel(id=_id(), driver_id=driver_id, log_date=date(2026, 5, 3), status="in_progress")
    )
    await db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await deprovisioning_service.deprovision(driver_id, expected_organization_id=company_id)

    assert exc_info.value.message == ACTIVE_SHIFT_MESSAGE
    db_session.expire_all()
    assert await db_session.get(DriverProfileModel, driver_id) is not None
    remaining = (
        await db_session.execute(select(DailyLogModel).where(DailyLogModel.driver_id == driver_id))
    ).scalars().all()
    assert len(remaining) == 3


@pytest.mark.asyncio
async def test_driver_of_other_company_is_forbidden(
    deprovisioning_service, db_session, make_driver, make_company, company, admin_user
):
    company_id, admin_id = company.id, admin_user.id
    other = await make_company("Other Fleet")
    other_id = other.id
    driver = await make_driver(other_id)
    driver_id = driver.id

    with pytest.raises(AuthorizationError):
        await deprovisioning_service.deprovision(
            driver_id, expected_organization_id=company_id, actor_id=admin_id
        )

    entry = (await SecurityAuditRepository(db_session).list_entries())[0]
    assert entry.action == "UNAUTHORIZED_DEPROVISION_ATTEMPT"
    assert entry.details == {"attempted_company_id": company_id, "actual_company_id": other_id}
    assert await db_session.get(DriverProfileModel, driver_id) is not None


@pytest.mark.asyncio
async def test_unknown_driver(deprovisioning_service):
    with pytest.raises(NotFoundError):
        await deprovisioning_service.deprovision(_id())


@pytest.mark.asyncio
async def test_accepted_invitation_is_detached(
    deprovisioning_service, db_session, make_driver, company, admin_user
):
    driver = await make_driver(company.id)
    driver_id = driver.id
    invitation_id = _id()
    db_session.add(
        DriverInvitationModel(
            id=invitation_id,
            email="accepted@example.com",
            first_name="Acc",
            last_name="Epted",
            company_id=company.id,
            invite_token=uuid.uuid4().hex,
            status="accepted",
            created_by=admin_user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=1),
            driver_profile_id=driver_id,
        )
    )
    await db_session.commit()

    await deprovisioning_service.deprovision(driver_id)

    db_session.expire_all()
    kept = await db_session.get(DriverInvitationModel, invitation_id)
    assert kept.status == "accepted"
    assert kept.driver_profile_id is None


@pytest.mark.asyncio
async def test_failed_table_is_reported_and_cascade_continues(
    db_session, identity_provider, audit_service, make_driver, company
):
    driver = await make_driver(company.id)
    driver_id = driver.id
    await add_records(db_session, driver_id)
    service = DriverDeprovisioningService(
        db_session,
        identity_provider,
        audit_service,
        record_repo=flaky_record_repo(db_session, ScheduleModel),
    )

    summary = await service.deprovision(driver_id)

    assert summary.partial_failure
    assert summary.failed_tables == {"schedules": "Delete failed (OperationalError)"}
    assert summary.deleted_records["schedules"] == 0
    assert summary.deleted_records["payments"] == 1
    assert summary.deleted_records["driver_profiles"] == 1
    assert summary.auth_user_deleted
    assert set(summary.deleted_records) == set(SUMMARY_TABLES)


@pytest.mark.asyncio
async def test_profile_delete_failure_reports_progress(
    db_session, identity_provider, audit_service, make_driver, company
):
    driver = await make_driver(company.id)
    driver_id = driver.id
    await add_records(db_session, driver_id)
    service = DriverDeprovisioningService(
        db_session,
        identity_provider,
        audit_service,
        record_repo=flaky_record_repo(db_session, PaymentModel),
    )

    with pytest.raises(DependencyFailureError) as exc_info:
        await service.deprovision(driver_id)

    progress = exc_info.value.details
    assert progress["failed_tables"] == {"payments": "Delete failed (OperationalError)"}
    assert progress["deleted_records"]["daily_logs"] == 2
    db_session.expire_all()
    assert await db_session.get(DriverProfileModel, driver_id) is not None
    entry = (await SecurityAuditRepository(db_session).list_entries())[0]
    assert entry.action == "DRIVER_DEPROVISION_FAILED"


@pytest.mark.asyncio
async def test_missing_account_is_not_reported_as_deleted(
    db_session, identity_provider, audit_service, make_driver, company, monkeypatch
):
    driver = await make_driver(company.id)
    driver_id, user_id = driver.id, driver.user_id
    monkeypatch.setattr(identity_provider, "delete_account", AsyncMock(return_value=False))
    service = DriverDeprovisioningService(db_session, identity_provider, audit_service)

    summary = await service.deprovision(driver_id)

    identity_provider.delete_account.assert_awaited_once_with(user_id)
    assert not summary.auth_user_deleted
    assert summary.message == REMOVAL_FAILED_MESSAGE
    assert summary.deleted_records["driver_profiles"] == 1
