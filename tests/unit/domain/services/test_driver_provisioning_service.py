"""Unit tests for DriverProvisioningService."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from driverdesk.domain.entities import RequestMetadata
from driverdesk.domain.errors import (
    AuthorizationError,
    ConflictError,
    EmailDeliveryFailedError,
    NotFoundError,
    ValidationFailedError,
)
from driverdesk.domain.services import RawDriverInput
from driverdesk.domain.services.driver_provisioning_service import EMAIL_NOT_SENT_WARNING
from driverdesk.infrastructure.auth import jwt_service, verify_password
from driverdesk.infrastructure.persistence.models import (
    DriverProfileModel,
    ProfileModel,
    UserCompanyModel,
    UserModel,
)
from driverdesk.infrastructure.persistence.repositories import SecurityAuditRepository
from driverdesk.infrastructure.services.email import EmailDeliveryError

METADATA = RequestMetadata(ip_address="198.51.100.9", user_agent="pytest")


def driver_input(company_id: str, **overrides) -> RawDriverInput:
    values = {
        "email": "Sam.Driver@Example.com",
        "first_name": "Sam",
        "last_name": "Driver",
        "organization_id": company_id,
        "rates": {},
    }
    values.update(overrides)
    return RawDriverInput(**values)


async def audit_actions(db_session) -> list[str]:
    entries = await SecurityAuditRepository(db_session).list_entries()
    return [entry.action for entry in entries]


class TestProvisionDriver:
    @pytest.mark.asyncio
    async def test_creates_pending_driver_with_default_rates(
        self, provisioning_service, db_session, admin_token, company, email_service
    ):
        provisioned = await provisioning_service.provision_driver(
            admin_token, driver_input(company.id), METADATA
        )

        assert provisioned.email_sent
        assert provisioned.warning is None

        user = await db_session.get(UserModel, provisioned.user_id)
        assert user.email == "sam.driver@example.com"
        assert verify_password(provisioned.temporary_password, user.password_hash)

        driver = await db_session.get(DriverProfileModel, provisioned.driver_profile_id)
        assert driver.status == "pending"
        assert driver.parcel_rate == Decimal("0.75")
        assert driver.cover_rate == Decimal("1.0")
        assert driver.requires_onboarding is True
        assert driver.onboarding_progress == {
            "personal_info": False,
            "account_setup": False,
            "documents_uploaded": False,
            "terms_accepted": False,
        }

        profile = (
            await db_session.execute(select(ProfileModel).where(ProfileModel.user_id == user.id))
        ).scalar_one()
        assert profile.user_type == "driver"
        membership = (
            await db_session.execute(
                select(UserCompanyModel).where(UserCompanyModel.user_id == user.id)
            )
        ).scalar_one()
        assert membership.role == "driver"
        assert membership.company_id == company.id

        kwargs = email_service.send_credentials_email.await_args.kwargs
        assert kwargs["temporary_password"] == provisioned.temporary_password
        assert "DRIVER_ACCOUNT_PROVISIONED" in await audit_actions(db_session)

    @pytest.mark.asyncio
    async def test_supplied_rates_are_used(
        self, provisioning_service, db_session, admin_token, company
    ):
        provisioned = await provisioning_service.provision_driver(
            admin_token,
            driver_input(company.id, rates={"parcel_rate": "1.10", "cover_rate": 2}),
            METADATA,
        )

        driver = await db_session.get(DriverProfileModel, provisioned.driver_profile_id)
        assert driver.parcel_rate == Decimal("1.10")
        assert driver.cover_rate == Decimal("2")

    @pytest.mark.asyncio
    async def test_per_unit_rate_ceiling(self, provisioning_service, admin_token, company):
        with pytest.raises(ValidationFailedError) as exc_info:
            await provisioning_service.provision_driver(
                admin_token, driver_input(company.id, rates={"parcel_rate": "51"}), METADATA
            )
        assert exc_info.value.details == [
            {
                "field": "parcel_rate",
                "message": "Parcel rate must be between 0-50",
                "code": "rate_out_of_range",
            }
        ]

    @pytest.mark.asyncio
    async def test_temporary_password_meets_policy(
        self, provisioning_service, admin_token, company
    ):
        provisioned = await provisioning_service.provision_driver(
            admin_token, driver_input(company.id), METADATA
        )
        password = provisioned.temporary_password

        assert len(password) == 12
        assert any(c.isupper() for c in password)
        assert any(c.islower() for c in password)
        assert any(c.isdigit() for c in password)
        assert any(c in "!@#$%^&*" for c in password)

    @pytest.mark.asyncio
    async def test_email_failure_keeps_account_and_warns(
        self, provisioning_service, db_session, admin_token, company, email_service
    ):
        email_service.send_credentials_email.side_effect = EmailDeliveryError("smtp down")

        provisioned = await provisioning_service.provision_driver(
            admin_token, driver_input(company.id), METADATA
        )

        assert not provisioned.email_sent
        assert provisioned.warning == EMAIL_NOT_SENT_WARNING
        assert provisioned.temporary_password
        assert await db_session.get(DriverProfileModel, provisioned.driver_profile_id) is not None
        actions = await audit_actions(db_session)
        assert "CREDENTIALS_EMAIL_FAILED" in actions
        assert "DRIVER_ACCOUNT_PROVISIONED" in actions

    @pytest.mark.asyncio
    async def test_existing_email_conflicts_without_side_effects(
        self, provisioning_service, db_session, admin_token, admin_user, company
    ):
        with pytest.raises(ConflictError):
            await provisioning_service.provision_driver(
                admin_token, driver_input(company.id, email=admin_user.email), METADATA
            )

        rows = (await db_session.execute(select(DriverProfileModel))).scalars().all()
        assert rows == []


class TestResendCredentials:
    @pytest.mark.asyncio
    async def test_rotates_password_and_sends(
        self, provisioning_service, db_session, admin_token, company, email_service
    ):
        provisioned = await provisioning_service.provision_driver(
            admin_token, driver_input(company.id), METADATA
        )
        email_service.send_credentials_email.return_value = "msg-resend-1"

        delivery_id = await provisioning_service.resend_credentials(
            admin_token, provisioned.driver_profile_id, METADATA
        )

        assert delivery_id == "msg-resend-1"
        new_password = email_service.send_credentials_email.await_args.kwargs["temporary_password"]
        assert new_password != provisioned.temporary_password
        user = await db_session.get(UserModel, provisioned.user_id)
        assert verify_password(new_password, user.password_hash)
        assert not verify_password(provisioned.temporary_password, user.password_hash)
        assert "CREDENTIALS_RESENT" in await audit_actions(db_session)

    @pytest.mark.asyncio
    async def test_email_failure_keeps_previous_password(
        self, provisioning_service, db_session, admin_token, company, email_service
    ):
        provisioned = await provisioning_service.provision_driver(
            admin_token, driver_input(company.id), METADATA
        )
        email_service.send_credentials_email.side_effect = EmailDeliveryError("provider down")

        with pytest.raises(EmailDeliveryFailedError) as exc_info:
            await provisioning_service.resend_credentials(
                admin_token, provisioned.driver_profile_id, METADATA
            )

        assert "previous password is still valid" in exc_info.value.message
        db_session.expire_all()
        user = await db_session.get(UserModel, provisioned.user_id)
        assert verify_password(provisioned.temporary_password, user.password_hash)

    @pytest.mark.asyncio
    async def test_unknown_driver(self, provisioning_service, admin_token):
        with pytest.raises(NotFoundError):
            await provisioning_service.resend_credentials(admin_token, "missing", METADATA)

    @pytest.mark.asyncio
    async def test_admin_of_other_company_is_forbidden(
        self, provisioning_service, admin_token, make_company, make_driver
    ):
        other = await make_company("Other Fleet")
        driver = await make_driver(other.id)

        with pytest.raises(AuthorizationError):
            await provisioning_service.resend_credentials(admin_token, driver.id, METADATA)
