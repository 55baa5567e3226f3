"""Console email provider for development.

Messages are written to the log instead of being delivered.
"""

import uuid

from driverdesk.core.logging import get_logger
from driverdesk.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class ConsoleProvider(EmailProvider):
    """Logs outgoing email and reports it as delivered."""

    name = "console"

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
        delivery_id = f"console-{uuid.uuid4()}"
        logger.info(
            "[EMAIL] Message logged instead of sent",
            delivery_id=delivery_id,
            to=to,
            subject=subject,
            sender=f"{from_name} <{from_email}>",
            body=text_body,
        )
        return delivery_id

    async def test_connection(self) -> tuple[bool, str | None]:
        return True, None
