"""Per-admin fixed-window rate limiting for driver onboarding.

Each (admin, company) pair may start a limited number of onboardings per
window. The counter is committed as soon as it changes, so a request that
fails later still counts. Two concurrent requests from the same admin can
both read the same count before either writes; that race is accepted.

If the counter store is unavailable the limiter allows the request and
logs a warning.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from driverdesk.core.config import get_settings
from driverdesk.core.logging import get_logger
from driverdesk.infrastructure.persistence.repositories import InvitationRateLimitRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a rate-limit check.

    Attributes:
        allowed: Whether the request may proceed.
        reason: Why the request was denied, None when allowed.
        remaining: Requests left in the current window after this one.
        degraded: True when the counter store failed and the check was skipped.
    """

    allowed: bool
    reason: str | None = None
    remaining: int = 0
    degraded: bool = False


class InvitationRateLimiter:
    """Fixed-window counter over the invitation_rate_limits table."""

    def __init__(
        self,
        session: AsyncSession,
        repository: InvitationRateLimitRepository | None = None,
        max_per_window: int | None = None,
        window_seconds: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            session: SQLAlchemy async session used to commit the counter.
            repository: Counter store, defaults to one over ``session``.
            max_per_window: Cap per window, defaults to the configured value.
            window_seconds: Window length, defaults to the configured value.
            clock: Returns the current UTC time; injectable for tests.
        """
        settings = get_settings()
        self.session = session
        self.repository = repository or InvitationRateLimitRepository(session)
        self.max_per_window = max_per_window or settings.invitation_rate_limit_per_hour
        self.window = timedelta(
            seconds=window_seconds or settings.invitation_rate_limit_window_seconds
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def denial_reason(self) -> str:
        return (
            f"Rate limit exceeded. Maximum {self.max_per_window} "
            "invitations per hour allowed."
        )

    async def check_and_increment(self, actor_id: str, organization_id: str) -> RateLimitDecision:
        """Count one attempt for the pair, or deny it when the cap is reached.

        Args:
            actor_id: Identity ID of the admin.
            organization_id: Company the admin acts for.

        Returns:
            The decision. Denied attempts are not counted.
        """
        now = self.clock()
        try:
            window = await self.repository.get_current_window(
                actor_id, organization_id, since=now - self.window
            )
            if window is None:
                await self.repository.open_window(actor_id, organization_id, now)
                await self.session.commit()
                return RateLimitDecision(allowed=True, remaining=self.max_per_window - 1)

            if window.invitations_sent >= self.max_per_window:
                logger.info(
                    "Invitation rate limit reached",
                    user_id=actor_id,
                    company_id=organization_id,
                    invitations_sent=window.invitations_sent,
                )
                return RateLimitDecision(allowed=False, reason=self.denial_reason, remaining=0)

            count = await self.repository.increment(window)
            await self.session.commit()
            return RateLimitDecision(allowed=True, remaining=max(self.max_per_window - count, 0))
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(
                "Invitation rate limiter degraded, failing open",
                user_id=actor_id,
                company_id=organization_id,
                error=str(e),
            )
            return RateLimitDecision(allowed=True, remaining=self.max_per_window, degraded=True)
