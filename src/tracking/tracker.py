"""Prediction verification and accuracy tracking.

Records every locked prediction, compares the final locked prediction for a
date against observed dawn conditions once the dawn patrol window closes,
and keeps a rolling accuracy history.
"""

from datetime import date, timedelta
from typing import Iterator

from src.lifecycle.clock import Clock
from src.lifecycle.schedule import LifecycleSchedule
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.db.repositories.lifecycle import LifecycleRepository
from src.shared.db.repositories.prediction_log import PredictionLogRepository
from src.shared.db.repositories.verification import VerificationRepository
from src.shared.errors import VerificationWindowError
from src.shared.models.prediction import Prediction
from src.shared.models.verification import (
    AccuracySummary,
    PredictionLogEntry,
    VerificationRecord,
)
from src.shared.models.weather import ObservedSignal
from src.tracking import accuracy

logger = get_logger(__name__)


class PredictionTracker:
    """Verification and tracking service.

    Example:
        >>> tracker = PredictionTracker(lifecycle_repo, verification_repo, log_repo, clock)
        >>> record = tracker.verify(date(2026, 10, 20), ObservedSignal(average_speed=17.0))
        >>> record.observed_conditions_met
        True
    """

    def __init__(
        self,
        lifecycle_repository: LifecycleRepository,
        verification_repository: VerificationRepository,
        log_repository: PredictionLogRepository,
        clock: Clock,
        settings: Settings | None = None,
    ) -> None:
        """Initialize tracker.

        Args:
            lifecycle_repository: Source of locked predictions
            verification_repository: Insert-only verification store
            log_repository: Append-only prediction log
            clock: Time source gating verification
            settings: Settings with verification constants
        """
        self.settings = settings or get_settings()
        self.lifecycle_repository = lifecycle_repository
        self.verification_repository = verification_repository
        self.log_repository = log_repository
        self.clock = clock
        self.schedule = LifecycleSchedule(self.settings)

    def record_prediction(self, prediction: Prediction) -> PredictionLogEntry:
        """Append a locked prediction to the log.

        Args:
            prediction: Prediction produced by a lock event

        Returns:
            Logged entry
        """
        entry = self.log_repository.append(prediction)
        logger.info(
            "prediction_recorded",
            target_date=prediction.target_date.isoformat(),
            lock_type=prediction.lock_type.value if prediction.lock_type else None,
            probability=prediction.probability,
            recommendation=prediction.recommendation.value,
        )
        return entry

    def verify(self, target_date: date, observed: ObservedSignal) -> VerificationRecord | None:
        """Verify a date's locked prediction against observed conditions.

        A date is verified at most once; later calls return the stored
        record unchanged.

        Args:
            target_date: Dawn patrol date
            observed: Observed dawn wind conditions

        Returns:
            Stored VerificationRecord, or None if no prediction was ever
            locked for the date

        Raises:
            VerificationWindowError: If called before the dawn window closed
        """
        now = self.clock.now()
        opens = self.schedule.verification_opens(target_date)
        if self.schedule.localize(now) < opens:
            raise VerificationWindowError(
                f"Verification for {target_date} opens at {opens.isoformat()}",
                details={"target_date": target_date.isoformat(), "opens_at": opens.isoformat()},
            )

        existing = self.verification_repository.get(target_date)
        if existing is not None:
            logger.info("verification_already_exists", target_date=target_date.isoformat())
            return existing

        prediction = self._locked_prediction(target_date)
        if prediction is None:
            logger.warning("verification_skipped_no_prediction", target_date=target_date.isoformat())
            return None

        s = self.settings
        conditions_met = accuracy.observed_conditions_met(observed, s)
        expected = accuracy.expected_speed(prediction.recommendation, s)
        score = accuracy.accuracy_score(
            prediction.predicts_favorable,
            conditions_met,
            observed.average_speed,
            expected,
            s,
        )

        record = VerificationRecord(
            target_date=target_date,
            predicted_probability=prediction.probability,
            predicted_recommendation=prediction.recommendation,
            predicted_confidence=prediction.confidence,
            observed_average_speed=observed.average_speed,
            observed_direction=observed.direction,
            observed_conditions_met=conditions_met,
            expected_speed=expected,
            accuracy_score=score,
            verified_at=now,
        )
        stored = self.verification_repository.insert(record)

        logger.info(
            "prediction_verified",
            target_date=target_date.isoformat(),
            recommendation=prediction.recommendation.value,
            observed_speed=observed.average_speed,
            conditions_met=conditions_met,
            accuracy_score=stored.accuracy_score,
        )
        return stored

    def get_accuracy_history(self, limit: int = 30) -> Iterator[VerificationRecord]:
        """Lazily yield recent verification records, newest first."""
        yield from self.verification_repository.iter_recent(limit)

    def get_accuracy_summary(self, limit: int = 30) -> AccuracySummary:
        """Aggregate the most recent verification records."""
        return accuracy.summarize(self.get_accuracy_history(limit))

    def get_predictions_for_date(self, target_date: date) -> list[PredictionLogEntry]:
        """List every logged lock event for a date, oldest first."""
        return self.log_repository.get_for_date(target_date)

    def purge_stale(self, older_than_days: int | None = None) -> int:
        """Drop verification records and log entries beyond retention.

        Args:
            older_than_days: Retention in days (settings default if None)

        Returns:
            Number of rows deleted across both stores
        """
        days = (
            older_than_days
            if older_than_days is not None
            else self.settings.verification_retention_days
        )
        cutoff = self.clock.now().date() - timedelta(days=days)
        deleted = self.verification_repository.purge_before(cutoff)
        deleted += self.log_repository.purge_before(cutoff)
        logger.info("tracking_records_purged", cutoff=cutoff.isoformat(), deleted=deleted)
        return deleted

    def _locked_prediction(self, target_date: date) -> Prediction | None:
        """Final locked prediction for a date, falling back to the latest logged lock."""
        record = self.lifecycle_repository.get(target_date)
        if record is not None and record.locked_prediction is not None:
            return record.locked_prediction
        latest = self.log_repository.get_latest(target_date)
        return latest.prediction if latest is not None else None
