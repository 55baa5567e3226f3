"""Unit tests for the onboarding email sender."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from driverdesk.core.config import Settings
from driverdesk.infrastructure.services.email import (
    EmailDeliveryError,
    EmailService,
    build_email_provider,
)
from driverdesk.infrastructure.services.email.console_provider import ConsoleProvider
from driverdesk.infrastructure.services.email.email_provider import EmailProvider
from driverdesk.infrastructure.services.email.resend_provider import ResendProvider
from driverdesk.infrastructure.services.email.smtp_provider import SMTPProvider


@pytest.fixture
def settings():
    return Settings(
        external_url="https://portal.example.com",
        email_from_address="fleet@example.com",
        email_from_name="Fleet Desk",
    )


@pytest.fixture
def provider():
    mock = MagicMock(spec=EmailProvider)
    mock.name = "mock"
    mock.send_email = AsyncMock(return_value="delivery-1")
    return mock


@pytest.mark.asyncio
async def test_send_returns_delivery_id_and_uses_sender(provider, settings):
    service = EmailService(provider, settings)

    delivery_id = await service.send("driver@example.com", "Hello", "<p>Hi <b>there</b></p>")

    assert delivery_id == "delivery-1"
    kwargs = provider.send_email.await_args.kwargs
    assert kwargs["from_email"] == "fleet@example.com"
    assert kwargs["from_name"] == "Fleet Desk"
    assert kwargs["text_body"] == "Hi there"


@pytest.mark.asyncio
async def test_send_wraps_provider_errors(provider, settings):
    provider.send_email.side_effect = ConnectionError("connection refused")
    service = EmailService(provider, settings)

    with pytest.raises(EmailDeliveryError, match="connection refused"):
        await service.send("driver@example.com", "Hello", "<p>Hi</p>")


@pytest.mark.asyncio
async def test_invitation_email_renders_name_and_link(provider, settings):
    service = EmailService(provider, settings)

    await service.send_invitation_email(
        to="jane@example.com",
        first_name="Jane",
        company_name="Acme Deliveries",
        onboarding_url="https://portal.example.com/onboarding?token=abc",
        expires_at=datetime(2026, 10, 25, 9, 30),
    )

    kwargs = provider.send_email.await_args.kwargs
    assert kwargs["to"] == "jane@example.com"
    assert kwargs["subject"] == "You're invited to join Acme Deliveries as a driver"
    assert "Hi Jane" in kwargs["html_body"]
    assert 'href="https://portal.example.com/onboarding?token=abc"' in kwargs["html_body"]
    assert "25 October 2026 09:30 UTC" in kwargs["text_body"]


@pytest.mark.asyncio
async def test_invitation_email_escapes_html(provider, settings):
    service = EmailService(provider, settings)

    await service.send_invitation_email(
        to="jane@example.com",
        first_name="<script>",
        company_name="Acme & Sons",
        onboarding_url="https://portal.example.com/onboarding?token=abc",
        expires_at=datetime(2026, 10, 25, 9, 30),
    )

    kwargs = provider.send_email.await_args.kwargs
    assert "&lt;script&gt;" in kwargs["html_body"]
    assert "<script>" in kwargs["text_body"]
    assert kwargs["subject"] == "You're invited to join Acme & Sons as a driver"


@pytest.mark.asyncio
async def test_credentials_email_contains_password_and_login_url(provider, settings):
    service = EmailService(provider, settings)

    await service.send_credentials_email(
        to="sam@example.com",
        first_name="Sam",
        company_name="Acme Deliveries",
        temporary_password="Xy7!abcdEFGH",
    )

    kwargs = provider.send_email.await_args.kwargs
    assert kwargs["subject"] == "Your Acme Deliveries driver account"
    assert "Xy7!abcdEFGH" in kwargs["text_body"]
    assert "sam@example.com" in kwargs["text_body"]
    assert "https://portal.example.com/login" in kwargs["html_body"]


@pytest.mark.asyncio
async def test_console_provider_reports_delivery():
    delivery_id = await ConsoleProvider().send_email(
        to="driver@example.com",
        subject="Hello",
        html_body="<p>Hi</p>",
        text_body="Hi",
        from_email="fleet@example.com",
        from_name="Fleet Desk",
    )

    assert delivery_id.startswith("console-")


def test_build_email_provider_defaults_to_console():
    assert isinstance(build_email_provider(Settings(email_provider="console")), ConsoleProvider)


def test_build_email_provider_resend():
    provider = build_email_provider(Settings(email_provider="resend", resend_api_key="re_test"))

    assert isinstance(provider, ResendProvider)


def test_build_email_provider_smtp():
    provider = build_email_provider(Settings(email_provider="smtp", smtp_host="mail.example.com"))

    assert isinstance(provider, SMTPProvider)


def test_incomplete_provider_settings_are_rejected():
    with pytest.raises(ValueError):
        Settings(email_provider="resend")
