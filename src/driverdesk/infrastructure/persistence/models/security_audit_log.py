"""SQLAlchemy model for the security_audit_log table.

Entries are append-only: the repository exposes no update or delete, and
database triggers reject both statements.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, event, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from driverdesk.infrastructure.persistence.database import Base, utc_now


class SecurityAuditLogModel(Base):
    """SQLAlchemy model for the security_audit_log table.

    Attributes:
        id: Auto-incrementing primary key (sequence number).
        subject_id: Record the action concerned (invitation, driver profile), if any.
        action: Audit action name, e.g. INVITATION_SENT.
        performed_by: Identity ID of the actor, or "anonymous"/"system".
        details: Structured context for the action.
        ip_address: Client address of the originating request.
        user_agent: User-Agent of the originating request.
        created_at: When the entry was written.
    """

    __tablename__ = "security_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    performed_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    details: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, default="unknown")
    user_agent: Mapped[str] = mapped_column(String(512), nullable=False, default="unknown")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )

    __table_args__ = (
        Index("ix_security_audit_log_action_created", "action", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SecurityAuditLog(id={self.id}, action={self.action}, "
            f"performed_by={self.performed_by})>"
        )


SQLITE_IMMUTABILITY_TRIGGERS = (
    """
    CREATE TRIGGER IF NOT EXISTS prevent_security_audit_log_update
    BEFORE UPDATE ON security_audit_log
    BEGIN
        SELECT RAISE(ABORT, 'Security audit entries are immutable and cannot be updated');
    END;
    """,
    """
    CREATE TRIGGER IF NOT EXISTS prevent_security_audit_log_delete
    BEFORE DELETE ON security_audit_log
    BEGIN
        SELECT RAISE(ABORT, 'Security audit entries are immutable and cannot be deleted');
    END;
    """,
)

POSTGRESQL_IMMUTABILITY_TRIGGERS = (
    """
    CREATE OR REPLACE FUNCTION reject_security_audit_log_change() RETURNS trigger AS $$
    BEGIN
        RAISE EXCEPTION USING MESSAGE =
            'Security audit entries are immutable and cannot be ' || lower(TG_OP) || 'd';
    END;
    $$ LANGUAGE plpgsql;
    """,
    """
    CREATE TRIGGER prevent_security_audit_log_update
    BEFORE UPDATE ON security_audit_log
    FOR EACH ROW EXECUTE FUNCTION reject_security_audit_log_change();
    """,
    """
    CREATE TRIGGER prevent_security_audit_log_delete
    BEFORE DELETE ON security_audit_log
    FOR EACH ROW EXECUTE FUNCTION reject_security_audit_log_change();
    """,
)

IMMUTABILITY_TRIGGERS = {
    "sqlite": SQLITE_IMMUTABILITY_TRIGGERS,
    "postgresql": POSTGRESQL_IMMUTABILITY_TRIGGERS,
}

DROP_IMMUTABILITY_TRIGGERS = {
    "sqlite": (
        "DROP TRIGGER IF EXISTS prevent_security_audit_log_update",
        "DROP TRIGGER IF EXISTS prevent_security_audit_log_delete",
    ),
    "postgresql": (
        "DROP TRIGGER IF EXISTS prevent_security_audit_log_update ON security_audit_log",
        "DROP TRIGGER IF EXISTS prevent_security_audit_log_delete ON security_audit_log",
        "DROP FUNCTION IF EXISTS reject_security_audit_log_change()",
    ),
}


@event.listens_for(SecurityAuditLogModel.__table__, "after_create")
def create_immutability_triggers(target, connection, **kw):
    """Reject UPDATE and DELETE on security_audit_log on SQLite and PostgreSQL."""
    for statement in IMMUTABILITY_TRIGGERS.get(connection.dialect.name, ()):
        connection.execute(text(statement))
