"""SQLAlchemy ORM models for the prediction store.

Defines the keyed lifecycle and verification collections and the
append-only prediction log. Domain records are stored whole as JSON
payloads; the scalar columns exist for keys, ordering and version checks.
"""

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleEntry(Base):
    """Lifecycle record for one target date (``lifecycle:{date}``)."""

    __tablename__ = "lifecycle_records"

    record_key: Mapped[str] = mapped_column(String(40), primary_key=True)
    target_date: Mapped[date] = mapped_column(Date, nullable=False, unique=True, index=True)
    state: Mapped[str] = mapped_column(String(20), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class VerificationEntry(Base):
    """Verification record for one target date (``verification:{date}``)."""

    __tablename__ = "verification_records"

    record_key: Mapped[str] = mapped_column(String(40), primary_key=True)
    target_date: Mapped[date] = mapped_column(Date, nullable=False, unique=True, index=True)
    accuracy_score: Mapped[float] = mapped_column(Float, nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class PredictionLogRow(Base):
    """Append-only log of locked predictions."""

    __tablename__ = "prediction_log"
    __table_args__ = (Index("idx_prediction_log_date_recorded", "target_date", "recorded_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    lock_type: Mapped[str | None] = mapped_column(String(10), nullable=True)
    probability: Mapped[int] = mapped_column(Integer, nullable=False)
    recommendation: Mapped[str] = mapped_column(String(10), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
