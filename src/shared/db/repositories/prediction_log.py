"""Prediction log repository.

Append-only record of every locked prediction, keyed by target date.
"""

from datetime import date

from sqlalchemy import desc, select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import PredictionLogRow
from src.shared.db.repositories.base import BaseRepository
from src.shared.models.enums import LockType
from src.shared.models.prediction import Prediction
from src.shared.models.verification import PredictionLogEntry

logger = get_logger(__name__)


def _to_entry(row: PredictionLogRow) -> PredictionLogEntry:
    return PredictionLogEntry(
        id=row.id,
        target_date=row.target_date,
        lock_type=LockType(row.lock_type) if row.lock_type else None,
        prediction=Prediction.model_validate(row.payload),
        recorded_at=row.recorded_at,
    )


class PredictionLogRepository(BaseRepository[PredictionLogRow]):
    """Repository for the append-only prediction log."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize prediction log repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, PredictionLogRow)

    def append(self, prediction: Prediction) -> PredictionLogEntry:
        """Append a prediction to the log.

        Args:
            prediction: Locked prediction to record

        Returns:
            Logged entry
        """
        with self._db.session() as session:
            row = PredictionLogRow(
                target_date=prediction.target_date,
                lock_type=prediction.lock_type.value if prediction.lock_type else None,
                probability=prediction.probability,
                recommendation=prediction.recommendation.value,
                payload=prediction.model_dump(mode="json"),
                recorded_at=self._utc_now(),
            )
            session.add(row)
            session.flush()
            entry = _to_entry(row)

        logger.debug(
            "prediction_logged",
            target_date=prediction.target_date.isoformat(),
            lock_type=entry.lock_type.value if entry.lock_type else None,
            id=entry.id,
        )
        return entry

    def get_for_date(self, target_date: date) -> list[PredictionLogEntry]:
        """Get all logged predictions for a target date, oldest first.

        Args:
            target_date: Dawn patrol date

        Returns:
            Logged entries in the order they were recorded
        """
        with self._db.session() as session:
            stmt = (
                select(PredictionLogRow)
                .where(PredictionLogRow.target_date == target_date)
                .order_by(PredictionLogRow.id)
            )
            return [_to_entry(row) for row in session.execute(stmt).scalars().all()]

    def get_latest(self, target_date: date) -> PredictionLogEntry | None:
        """Get the most recently logged prediction for a target date.

        Args:
            target_date: Dawn patrol date

        Returns:
            Latest entry or None if nothing was logged
        """
        with self._db.session() as session:
            stmt = (
                select(PredictionLogRow)
                .where(PredictionLogRow.target_date == target_date)
                .order_by(desc(PredictionLogRow.id))
                .limit(1)
            )
            row = session.execute(stmt).scalars().first()
            return _to_entry(row) if row is not None else None
