"""Resend email provider implementation.

Uses the Resend Python SDK for email sending via Resend API.
"""

import asyncio

import resend
from pydantic import BaseModel, ConfigDict

from driverdesk.core.logging import get_logger
from driverdesk.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class ResendSettings(BaseModel):
    """Configuration settings for the Resend provider."""

    model_config = ConfigDict(from_attributes=True)

    api_key: str
    from_email: str
    from_name: str = "Driver Portal"
    reply_to: str | None = None


class ResendProvider(EmailProvider):
    """Sends email through the Resend API."""

    name = "resend"

    def __init__(self, settings: ResendSettings) -> None:
        """Initialize the Resend provider.

        Args:
            settings: Resend configuration settings.
        """
        self.settings = settings
        resend.api_key = settings.api_key

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: str | None = None,
    ) -> str:
        """Send an email via Resend.

        Returns:
            The Resend email ID.

        Raises:
            Exception: If Resend rejects the request.
        """
        sender = (
            f"{from_name or self.settings.from_name} <{from_email or self.settings.from_email}>"
        )
        params = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        reply_addr = reply_to or self.settings.reply_to
        if reply_addr:
            params["reply_to"] = reply_addr

        try:
            # The SDK is synchronous
            response = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            error_message = str(e)
            if "Invalid API key" in error_message or "Unauthorized" in error_message:
                logger.error("Resend authentication failed", error=error_message, to=to)
            elif "rate limit" in error_message.lower():
                logger.error("Resend rate limit exceeded", error=error_message, to=to)
            else:
                logger.error("Resend API error", error=error_message, to=to)
            raise

        email_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        logger.info("Email sent via Resend", email_id=email_id, to=to)
        return email_id or ""

    async def test_connection(self) -> tuple[bool, str | None]:
        """Validate the API key with a lightweight domains listing."""
        try:
            await asyncio.to_thread(resend.Domains.list)
        except Exception as e:
            logger.error("Resend connection test failed", error=str(e))
            return False, f"Resend connection failed: {e}"
        return True, None
