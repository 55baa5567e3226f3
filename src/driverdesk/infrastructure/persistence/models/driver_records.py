"""SQLAlchemy models for records that depend on a driver profile.

Each table references driver_profiles.id without ON DELETE CASCADE: the
deprovisioning service removes children explicitly, in dependency order,
before the profile itself.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from driverdesk.infrastructure.persistence.database import Base, utc_now


class DriverRecordMixin:
    """Columns shared by every driver-dependent table."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    @declared_attr
    def driver_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("driver_profiles.id"),
            nullable=False,
            index=True,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, driver_id={self.driver_id})>"


class DailyLogModel(DriverRecordMixin, Base):
    """Aggregate record of one working day; in_progress while a shift is open."""

    __tablename__ = "daily_logs"

    log_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="in_progress")

    __table_args__ = (
        CheckConstraint(
            "status IN ('in_progress', 'completed', 'cancelled')",
            name="ck_daily_logs_status",
        ),
    )


class VehicleCheckModel(DriverRecordMixin, Base):
    __tablename__ = "vehicle_checks"

    van_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    passed: Mapped[bool | None] = mapped_column(nullable=True)


class RouteFeedbackModel(DriverRecordMixin, Base):
    __tablename__ = "route_feedback"

    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)


class SodLogModel(DriverRecordMixin, Base):
    """Start-of-day log."""

    __tablename__ = "sod_logs"

    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)


class EodReportModel(DriverRecordMixin, Base):
    """End-of-day report."""

    __tablename__ = "eod_reports"

    parcels_delivered: Mapped[int | None] = mapped_column(Integer, nullable=True)


class IncidentReportModel(DriverRecordMixin, Base):
    __tablename__ = "incident_reports"

    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class DriverExpenseModel(DriverRecordMixin, Base):
    __tablename__ = "driver_expenses"

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)


class DriverEarningModel(DriverRecordMixin, Base):
    __tablename__ = "driver_earnings"

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)


class DriverAchievementModel(DriverRecordMixin, Base):
    __tablename__ = "driver_achievements"

    achievement: Mapped[str | None] = mapped_column(String(100), nullable=True)


class DriverRatingModel(DriverRecordMixin, Base):
    __tablename__ = "driver_ratings"

    score: Mapped[int | None] = mapped_column(Integer, nullable=True)


class DriverInvoiceModel(DriverRecordMixin, Base):
    __tablename__ = "driver_invoices"

    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)


class PaymentModel(DriverRecordMixin, Base):
    __tablename__ = "payments"

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)


class ScheduleModel(DriverRecordMixin, Base):
    __tablename__ = "schedules"

    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)


# Children before the records they reference; daily_logs last.
DEPENDENT_RECORD_MODELS: tuple[type[DriverRecordMixin], ...] = (
    VehicleCheckModel,
    RouteFeedbackModel,
    SodLogModel,
    IncidentReportModel,
    DriverExpenseModel,
    DriverEarningModel,
    DriverAchievementModel,
    DriverRatingModel,
    DriverInvoiceModel,
    PaymentModel,
    ScheduleModel,
    EodReportModel,
    DailyLogModel,
)
