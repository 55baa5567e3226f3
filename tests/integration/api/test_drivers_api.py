"""Integration tests for driver provisioning and deprovisioning endpoints."""

import uuid
from datetime import date

import pytest

from driverdesk.infrastructure.auth import jwt_service
from driverdesk.infrastructure.persistence.models import (
    DailyLogModel,
    DriverProfileModel,
    UserModel,
)
from driverdesk.infrastructure.persistence.repositories import SecurityAuditRepository

BASE = "/api/v1/drivers"


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def driver_payload(company_id: str, **overrides) -> dict:
    payload = {
        "email": "sam.driver@example.com",
        "first_name": "Sam",
        "last_name": "Driver",
        "company_id": company_id,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_provision_driver(client, admin_token, company, db_session, email_service):
    response = await client.post(BASE, json=driver_payload(company.id), headers=auth(admin_token))

    assert response.status_code == 201
    data = response.json()
    assert data["email_sent"] is True
    assert data["warning"] is None
    assert len(data["temporary_password"]) == 12
    profile = await db_session.get(DriverProfileModel, data["driver_profile_id"])
    assert profile.company_id == company.id
    email_service.send_credentials_email.assert_awaited_once()


@pytest.mark.asyncio
async def test_provision_driver_rate_out_of_range(client, admin_token, company):
    response = await client.post(
        BASE, json=driver_payload(company.id, parcel_rate="75"), headers=auth(admin_token)
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["code"] == "rate_out_of_range"


@pytest.mark.asyncio
async def test_provision_driver_with_email_in_use(client, admin_token, company, admin_user):
    response = await client.post(
        BASE,
        json=driver_payload(company.id, email="admin@acme.example.com"),
        headers=auth(admin_token),
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_provision_driver_requires_admin(client, company, make_user):
    driver_user = await make_user(company.id, role="driver")
    token = jwt_service.create_access_token(user_id=driver_user.id, email=driver_user.email)

    response = await client.post(BASE, json=driver_payload(company.id), headers=auth(token))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_resend_credentials(client, admin_token, company, email_service):
    created = await client.post(BASE, json=driver_payload(company.id), headers=auth(admin_token))
    driver_profile_id = created.json()["driver_profile_id"]

    response = await client.post(
        f"{BASE}/{driver_profile_id}/resend-credentials", headers=auth(admin_token)
    )

    assert response.status_code == 200
    assert response.json()["delivery_id"] == "msg-credentials-1"
    assert email_service.send_credentials_email.await_count == 2


@pytest.mark.asyncio
async def test_resend_credentials_unknown_driver(client, admin_token):
    response = await client.post(
        f"{BASE}/{uuid.uuid4()}/resend-credentials", headers=auth(admin_token)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_driver(client, admin_token, company, make_driver, db_session):
    driver = await make_driver(company.id)
    driver_id, user_id = driver.id, driver.user_id

    response = await client.delete(
        f"{BASE}/{driver_id}", params={"company_id": company.id}, headers=auth(admin_token)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["auth_user_deleted"] is True
    assert data["partial_failure"] is False
    assert data["deleted_records"]["driver_profiles"] == 1
    db_session.expire_all()
    assert await db_session.get(UserModel, user_id) is None


@pytest.mark.asyncio
async def test_delete_driver_with_uppercase_company_id(
    client, admin_token, company, make_driver, db_session
):
    driver = await make_driver(company.id)

    response = await client.delete(
        f"{BASE}/{driver.id}",
        params={"company_id": company.id.upper()},
        headers=auth(admin_token),
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    actions = [entry.action for entry in await SecurityAuditRepository(db_session).list_entries()]
    assert "UNAUTHORIZED_DEPROVISION_ATTEMPT" not in actions
    assert "DRIVER_DEPROVISIONED" in actions


@pytest.mark.asyncio
async def test_delete_driver_of_other_company(
    client, admin_token, company, make_company, make_driver
):
    other = await make_company("Other Fleet")
    driver = await make_driver(other.id)

    response = await client.delete(
        f"{BASE}/{driver.id}", params={"company_id": company.id}, headers=auth(admin_token)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_driver_for_company_actor_does_not_administer(
    client, admin_token, make_company, make_driver
):
    other = await make_company("Other Fleet")
    driver = await make_driver(other.id)

    response = await client.delete(
        f"{BASE}/{driver.id}", params={"company_id": other.id}, headers=auth(admin_token)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_driver_with_active_shift(
    client, admin_token, company, make_driver, db_session
):
    driver = await make_driver(company.id)
    driver_id = driver.id
    db_session.add(
        DailyLogModel(
            id=str(uuid.uuid4()),
            driver_id=driver_id,
            log_date=date(2026, 10, 18),
            status="in_progress",
        )
    )
    await db_session.commit()

    response = await client.delete(
        f"{BASE}/{driver_id}", params={"company_id": company.id}, headers=auth(admin_token)
    )

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_delete_driver_requires_authentication(client, company, make_driver):
    driver = await make_driver(company.id)

    response = await client.delete(f"{BASE}/{driver.id}", params={"company_id": company.id})

    assert response.status_code == 401
