"""SQLAlchemy model for the users table.

Users are login identities. An identity is global: the same person can
hold roles in several companies through user_companies.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Primary key (UUID string).
        email: Lowercased login email, unique across the system.
        password_hash: Argon2 password hash.
        is_active: Whether the identity can log in.
        user_metadata: Free-form metadata recorded at account creation.
        created_at: Timestamp when the identity was created.
        updated_at: Timestamp when the identity was last updated.
        last_login: Timestamp of the last successful login.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="User ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login email address (lowercased)",
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password (argon2)",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user can log in",
    )
    user_metadata: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Metadata supplied when the account was created",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
