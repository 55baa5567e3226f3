"""Unit tests for SecurityAuditService."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DatabaseError, OperationalError

from driverdesk.domain.entities import RequestMetadata
from driverdesk.domain.services import AuditAction, SecurityAuditService
from driverdesk.infrastructure.persistence.repositories import SecurityAuditRepository


def _db_error() -> OperationalError:
    return OperationalError("INSERT", {}, Exception("disk I/O error"))


@pytest.mark.asyncio
async def test_record_stores_entry_with_metadata(db_session, audit_service):
    stored = await audit_service.record(
        "inv-1",
        AuditAction.INVITATION_SENT,
        "admin-1",
        {"rate": Decimal("12.50"), "expires_at": datetime(2026, 5, 1, tzinfo=timezone.utc)},
        RequestMetadata(ip_address="203.0.113.7", user_agent="pytest"),
    )

    assert stored
    entries = await SecurityAuditRepository(db_session).list_entries()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action == "INVITATION_SENT"
    assert entry.subject_id == "inv-1"
    assert entry.performed_by == "admin-1"
    assert entry.ip_address == "203.0.113.7"
    assert entry.user_agent == "pytest"
    assert entry.details == {"rate": "12.50", "expires_at": "2026-05-01T00:00:00+00:00"}


@pytest.mark.asyncio
async def test_missing_actor_is_recorded_as_anonymous(db_session, audit_service):
    await audit_service.record(None, AuditAction.UNAUTHENTICATED_INVITE_ATTEMPT, None)

    entry = (await SecurityAuditRepository(db_session).list_entries())[0]
    assert entry.performed_by == "anonymous"
    assert entry.ip_address == "unknown"
    assert entry.details == {}


@pytest.mark.asyncio
async def test_list_entries_filters(db_session, audit_service):
    await audit_service.record("a", AuditAction.INVITATION_SENT, "admin-1")
    await audit_service.record("b", AuditAction.INVITATION_CANCELLED, "admin-1")
    await audit_service.record("a", AuditAction.INVITATION_ACCEPTED, "driver-1")

    repo = SecurityAuditRepository(db_session)
    assert [e.action for e in await repo.list_entries(subject_id="a")] == [
        "INVITATION_ACCEPTED",
        "INVITATION_SENT",
    ]
    assert len(await repo.list_entries(performed_by="admin-1")) == 2
    assert len(await repo.list_entries(action="INVITATION_CANCELLED")) == 1


@pytest.mark.asyncio
async def test_entries_cannot_be_updated_or_deleted(db_session, audit_service):
    await audit_service.record("inv-1", AuditAction.INVITATION_SENT, "admin-1")

    with pytest.raises(DatabaseError):
        await db_session.execute(text("UPDATE security_audit_log SET action = 'TAMPERED'"))
    await db_session.rollback()

    with pytest.raises(DatabaseError):
        await db_session.execute(text("DELETE FROM security_audit_log"))
    await db_session.rollback()

    assert len(await SecurityAuditRepository(db_session).list_entries()) == 1


@pytest.mark.asyncio
async def test_retries_after_transient_failure():
    session = AsyncMock()
    repository = MagicMock()
    repository.create = AsyncMock(side_effect=[_db_error(), None])
    service = SecurityAuditService(session, repository=repository, max_attempts=2)

    assert await service.record(None, AuditAction.RATE_LIMIT_EXCEEDED, "admin-1")
    assert repository.create.await_count == 2
    session.rollback.assert_awaited_once()
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_persistent_failure_does_not_raise():
    session = AsyncMock()
    repository = MagicMock()
    repository.create = AsyncMock(side_effect=_db_error())
    service = SecurityAuditService(session, repository=repository, max_attempts=3)

    assert await service.record(None, AuditAction.RATE_LIMIT_EXCEEDED, "admin-1") is False
    assert repository.create.await_count == 3
