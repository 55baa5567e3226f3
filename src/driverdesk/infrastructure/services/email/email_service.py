"""Notification sender for onboarding emails.

Wraps the configured provider behind one ``send`` call that either returns a
delivery ID or raises EmailDeliveryError, and renders the invitation and
credential messages.
"""

import re
from datetime import datetime

from jinja2 import TemplateError

from driverdesk.core.config import Settings, get_settings
from driverdesk.core.logging import get_logger
from driverdesk.infrastructure.services.email import template_renderer as templates
from driverdesk.infrastructure.services.email.console_provider import ConsoleProvider
from driverdesk.infrastructure.services.email.email_provider import EmailProvider
from driverdesk.infrastructure.services.email.resend_provider import (
    ResendProvider,
    ResendSettings,
)
from driverdesk.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from driverdesk.infrastructure.services.email.template_renderer import (
    TemplateRenderer,
    get_template_renderer,
)

logger = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


class EmailDeliveryError(Exception):
    """Raised when a message could not be handed to the provider."""

    pass


class EmailService:
    """Sends onboarding emails through an EmailProvider."""

    def __init__(
        self,
        provider: EmailProvider,
        settings: Settings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        """Initialize the email service.

        Args:
            provider: Provider that performs the delivery.
            settings: Application settings for sender identity.
            renderer: Template renderer, defaults to the shared instance.
        """
        self.provider = provider
        self.settings = settings or get_settings()
        self.renderer = renderer or get_template_renderer()

    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> str:
        """Send one message.

        Args:
            to: Recipient address.
            subject: Subject line.
            html_body: HTML body.
            text_body: Plain text body; derived from the HTML when omitted.

        Returns:
            Provider delivery ID.

        Raises:
            EmailDeliveryError: If the provider fails.
        """
        if text_body is None:
            text_body = _TAG_RE.sub("", html_body).strip()
        try:
            delivery_id = await self.provider.send_email(
                to=to,
                subject=subject,
                html_body=html_body,
                text_body=text_body,
                from_email=self.settings.email_from_address,
                from_name=self.settings.email_from_name,
                reply_to=self.settings.email_reply_to,
            )
        except Exception as e:
            logger.warning(
                "Email delivery failed",
                provider=self.provider.name,
                to=to,
                error=str(e),
            )
            raise EmailDeliveryError(str(e)) from e
        return delivery_id

    async def send_invitation_email(
        self,
        to: str,
        first_name: str,
        company_name: str,
        onboarding_url: str,
        expires_at: datetime,
    ) -> str:
        """Render and send the driver invitation email.

        Returns:
            Provider delivery ID.

        Raises:
            EmailDeliveryError: If rendering or delivery fails.
        """
        variables = {
            "first_name": first_name,
            "company_name": company_name,
            "onboarding_url": onboarding_url,
            "expires_at": expires_at.strftime("%d %B %Y %H:%M UTC"),
        }
        subject, html_body, text_body = self._render(
            templates.INVITATION_SUBJECT,
            templates.INVITATION_HTML,
            templates.INVITATION_TEXT,
            variables,
        )
        return await self.send(to, subject, html_body, text_body)

    async def send_credentials_email(
        self,
        to: str,
        first_name: str,
        company_name: str,
        temporary_password: str,
    ) -> str:
        """Render and send the temporary credentials email.

        Returns:
            Provider delivery ID.

        Raises:
            EmailDeliveryError: If rendering or delivery fails.
        """
        variables = {
            "first_name": first_name,
            "company_name": company_name,
            "email": to,
            "temporary_password": temporary_password,
            "login_url": f"{self.settings.external_url}/login",
        }
        subject, html_body, text_body = self._render(
            templates.CREDENTIALS_SUBJECT,
            templates.CREDENTIALS_HTML,
            templates.CREDENTIALS_TEXT,
            variables,
        )
        return await self.send(to, subject, html_body, text_body)

    def _render(self, subject: str, html: str, text: str, variables: dict) -> tuple[str, str, str]:
        try:
            return self.renderer.render_message(subject, html, text, variables)
        except TemplateError as e:
            raise EmailDeliveryError(f"Template rendering failed: {e}") from e


def build_email_provider(settings: Settings) -> EmailProvider:
    """Create the provider selected by ``settings.email_provider``."""
    if settings.email_provider == "resend":
        return ResendProvider(
            ResendSettings(
                api_key=settings.resend_api_key,
                from_email=settings.email_from_address,
                from_name=settings.email_from_name,
                reply_to=settings.email_reply_to,
            )
        )
    if settings.email_provider == "smtp":
        return SMTPProvider(
            SMTPSettings(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                from_email=settings.email_from_address,
                from_name=settings.email_from_name,
                reply_to=settings.email_reply_to,
                timeout=settings.smtp_timeout,
            )
        )
    return ConsoleProvider()


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get the global email service, built from settings on first use."""
    global _email_service
    if _email_service is None:
        settings = get_settings()
        _email_service = EmailService(build_email_provider(settings), settings)
        logger.info("Email service initialized", provider=_email_service.provider.name)
    return _email_service
