"""Unit tests for InvitationRateLimiter."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from driverdesk.domain.services import InvitationRateLimiter
from driverdesk.infrastructure.persistence.models import InvitationRateLimitModel


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(db_session, clock) -> InvitationRateLimiter:
    return InvitationRateLimiter(db_session, max_per_window=3, window_seconds=3600, clock=clock)


@pytest.mark.asyncio
async def test_first_attempt_opens_window(limiter, db_session):
    decision = await limiter.check_and_increment("admin-1", "company-1")

    assert decision.allowed
    assert decision.remaining == 2
    assert not decision.degraded
    rows = (await db_session.execute(select(InvitationRateLimitModel))).scalars().all()
    assert len(rows) == 1
    assert rows[0].invitations_sent == 1


@pytest.mark.asyncio
async def test_denies_at_cap_without_counting(limiter, db_session):
    for _ in range(3):
        assert (await limiter.check_and_increment("admin-1", "company-1")).allowed

    decision = await limiter.check_and_increment("admin-1", "company-1")

    assert not decision.allowed
    assert decision.remaining == 0
    assert decision.reason == "Rate limit exceeded. Maximum 3 invitations per hour allowed."
    window = (await db_session.execute(select(InvitationRateLimitModel))).scalar_one()
    assert window.invitations_sent == 3


@pytest.mark.asyncio
async def test_pairs_are_counted_independently(limiter):
    for _ in range(3):
        await limiter.check_and_increment("admin-1", "company-1")

    assert (await limiter.check_and_increment("admin-1", "company-2")).allowed
    assert (await limiter.check_and_increment("admin-2", "company-1")).allowed


@pytest.mark.asyncio
async def test_new_window_after_expiry(limiter, clock):
    for _ in range(3):
        await limiter.check_and_increment("admin-1", "company-1")
    assert not (await limiter.check_and_increment("admin-1", "company-1")).allowed

    clock.advance(hours=1, seconds=1)
    decision = await limiter.check_and_increment("admin-1", "company-1")

    assert decision.allowed
    assert decision.remaining == 2


@pytest.mark.asyncio
async def test_fails_open_when_store_is_unavailable():
    session = AsyncMock()
    repository = MagicMock()
    repository.get_current_window = AsyncMock(
        side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
    )
    limiter = InvitationRateLimiter(session, repository=repository, max_per_window=5)

    decision = await limiter.check_and_increment("admin-1", "company-1")

    assert decision.allowed
    assert decision.degraded
    session.rollback.assert_awaited_once()
