"""SMTP email provider implementation.

Uses aiosmtplib for asynchronous email sending via SMTP.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

import aiosmtplib
from pydantic import BaseModel, ConfigDict

from driverdesk.core.logging import get_logger
from driverdesk.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Configuration settings for the SMTP provider."""

    model_config = ConfigDict(from_attributes=True)

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    from_email: str
    from_name: str = "Driver Portal"
    reply_to: str | None = None
    timeout: int = 10


class SMTPProvider(EmailProvider):
    """Sends email over SMTP with STARTTLS."""

    name = "smtp"

    def __init__(self, settings: SMTPSettings) -> None:
        """Initialize the SMTP provider.

        Args:
            settings: SMTP configuration settings.
        """
        self.settings = settings

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
        """Send an email via SMTP.

        Returns:
            The Message-ID header of the sent message.

        Raises:
            Exception: If SMTP connection or sending fails.
        """
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = (
            f"{from_name or self.settings.from_name} <{from_email or self.settings.from_email}>"
        )
        message["To"] = to
        message["Message-ID"] = make_msgid()

        reply_addr = reply_to or self.settings.reply_to
        if reply_addr:
            message["Reply-To"] = reply_addr

        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=self.settings.password,
                start_tls=self.settings.use_tls,
                timeout=self.settings.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email via SMTP", host=self.settings.host, error=str(e))
            raise

        return message["Message-ID"]

    async def test_connection(self) -> tuple[bool, str | None]:
        """Connect and authenticate without sending."""
        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.host,
                port=self.settings.port,
                start_tls=self.settings.use_tls,
                timeout=self.settings.timeout,
            ) as smtp:
                if self.settings.username and self.settings.password:
                    await smtp.login(self.settings.username, self.settings.password)
        except (aiosmtplib.SMTPException, OSError) as e:
            error_msg = f"SMTP connection failed: {e}"
            logger.error("SMTP connection test failed", host=self.settings.host, error=str(e))
            return False, error_msg
        return True, None
