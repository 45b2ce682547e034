"""Prediction lifecycle state manager.

Every dawn patrol date moves through the same states, driven purely by the
clock:

    preview -> locked-evening -> locked-final -> active -> verified

Preview predictions are recomputed on every request. Inside the evening
window each request refreshes the evening lock. Once locked-final is reached
the locked prediction is frozen and served unchanged to every caller, and
the verification tracker scores it after the dawn window closes.

The manager is the only writer of lifecycle records. Writes carry the
version they were read at; a conflicting write is retried once from the
stored record and otherwise yields to whatever is stored.
"""

from datetime import date, timedelta
from typing import Any, Protocol

from src.lifecycle.clock import Clock
from src.lifecycle.schedule import LifecycleSchedule
from src.predictor.analyzer import KatabaticAnalyzer
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.db.repositories.lifecycle import LifecycleRepository
from src.shared.errors import LockConflictError, SignalUnavailableError, StaleWriteError
from src.shared.models.enums import LIFECYCLE_SEQUENCE, LifecycleState, LockType, ReasonCode
from src.shared.models.lifecycle import LifecycleRecord, StateTransition
from src.shared.models.prediction import Prediction
from src.shared.models.weather import WeatherSignal

logger = get_logger(__name__)


class WeatherSignalProvider(Protocol):
    """Supplies the normalized weather inputs for a target date."""

    def fetch_signal(self, target_date: date) -> WeatherSignal:
        """Fetch inputs for a target date.

        Raises:
            SignalUnavailableError: If no inputs can be obtained
        """
        ...


class PredictionRecorder(Protocol):
    """Receives every prediction the manager locks."""

    def record_prediction(self, prediction: Prediction) -> Any: ...


class PredictionStateManager:
    """Owns the lifecycle record of every target date.

    Example:
        >>> manager = PredictionStateManager(repo, analyzer, provider, clock)
        >>> prediction = manager.request_prediction(date(2026, 10, 20))
        >>> prediction.lifecycle_state
        <LifecycleState.PREVIEW: 'preview'>
    """

    def __init__(
        self,
        repository: LifecycleRepository,
        analyzer: KatabaticAnalyzer,
        signal_provider: WeatherSignalProvider,
        clock: Clock,
        settings: Settings | None = None,
        recorder: PredictionRecorder | None = None,
        max_write_attempts: int = 2,
    ) -> None:
        """Initialize state manager.

        Args:
            repository: Lifecycle record store
            analyzer: Analyzer used to compute fresh predictions
            signal_provider: Weather input source
            clock: Time source driving transitions
            settings: Settings with checkpoint times and retention
            recorder: Optional sink notified of every locked prediction
            max_write_attempts: Attempts before yielding to the stored record
        """
        self.settings = settings or get_settings()
        self.repository = repository
        self.analyzer = analyzer
        self.signal_provider = signal_provider
        self.clock = clock
        self.recorder = recorder
        self.max_write_attempts = max_write_attempts
        self.schedule = LifecycleSchedule(self.settings)

    def get_current_state(self, target_date: date) -> LifecycleRecord:
        """View a target date's lifecycle as of now, without writing.

        Args:
            target_date: Dawn patrol date

        Returns:
            Stored record advanced to the current state in memory, or a
            transient preview record if the date was never requested
        """
        now = self.clock.now()
        record = self.repository.get(target_date) or LifecycleRecord(target_date=target_date)
        return self._advance(record, self.schedule.state_at(target_date, now))

    def request_prediction(self, target_date: date) -> Prediction:
        """Serve the prediction appropriate to the current lifecycle state.

        A failed weather fetch during the evening window keeps the current
        evening lock. A date that reaches verified without any lock gets a
        late preliminary prediction tagged NO_PRIOR_LOCK. That prediction is
        recomputed on every request and never stored, because the lock
        window has closed.

        Args:
            target_date: Dawn patrol date

        Returns:
            Fresh preview, refreshed evening lock, the frozen final lock,
            or a late preliminary prediction
        """
        for attempt in range(1, self.max_write_attempts + 1):
            try:
                return self._serve(target_date)
            except StaleWriteError as e:
                logger.warning(
                    "lifecycle_write_conflict",
                    target_date=target_date.isoformat(),
                    attempt=attempt,
                    expected_version=e.details.get("expected_version"),
                )

        stored = self.repository.get(target_date)
        if stored is not None and stored.locked_prediction is not None:
            return stored.locked_prediction
        return self._compute(target_date)

    def lock(
        self,
        target_date: date,
        prediction: Prediction,
        lock_type: LockType,
    ) -> LifecycleRecord:
        """Lock a prediction for a target date.

        Re-locking with the same prediction is a no-op. A lock that the
        current state does not permit leaves the stored record untouched.

        Args:
            target_date: Dawn patrol date
            prediction: Prediction to lock
            lock_type: Checkpoint the lock belongs to

        Returns:
            Authoritative lifecycle record after the call
        """
        if prediction.target_date != target_date:
            raise ValueError(
                f"Prediction for {prediction.target_date} cannot lock {target_date}"
            )

        stored = self.repository.get(target_date)
        record = self._advance(
            stored or LifecycleRecord(target_date=target_date),
            self.schedule.state_at(target_date, self.clock.now()),
        )

        try:
            self._check_lock_permitted(record, lock_type)
        except LockConflictError:
            return self._persist_quietly(record, stored)

        locked = self._stamp(prediction, record.state, lock_type)
        if record.locked_prediction == locked:
            return self._persist_quietly(record, stored)

        record = self._apply_lock(record, locked, lock_type)
        try:
            saved = self.repository.save(record)
        except StaleWriteError:
            return self.repository.get(target_date) or record

        self._notify(saved, stored)
        return saved

    def purge_stale(self, older_than_days: int | None = None) -> int:
        """Delete lifecycle records for dates older than the retention window.

        Args:
            older_than_days: Retention in days (settings default if None)

        Returns:
            Number of records deleted
        """
        days = (
            older_than_days
            if older_than_days is not None
            else self.settings.lifecycle_retention_days
        )
        cutoff = self.clock.now().date() - timedelta(days=days)
        deleted = self.repository.purge_before(cutoff)
        logger.info("lifecycle_records_purged", cutoff=cutoff.isoformat(), deleted=deleted)
        return deleted

    def _serve(self, target_date: date) -> Prediction:
        now = self.clock.now()
        stored = self.repository.get(target_date)
        record = self._advance(
            stored or LifecycleRecord(target_date=target_date),
            self.schedule.state_at(target_date, now),
        )

        if record.state is LifecycleState.PREVIEW:
            prediction = self._compute(target_date)
            if record != stored:
                self.repository.save(record)
            return prediction

        if record.state is LifecycleState.LOCKED_EVENING:
            prediction = self._compute(target_date)
            if (
                ReasonCode.SIGNAL_UNAVAILABLE in prediction.reasons
                and record.locked_prediction is not None
            ):
                # A failed refresh keeps the last lock scored from real inputs.
                logger.warning(
                    "evening_refresh_skipped",
                    target_date=target_date.isoformat(),
                    locked_at=record.locked_at.isoformat() if record.locked_at else None,
                )
                if record != stored:
                    self.repository.save(record)
                return record.locked_prediction
            locked = self._stamp(prediction, record.state, LockType.EVENING)
            saved = self.repository.save(self._apply_lock(record, locked, LockType.EVENING))
            self._notify(saved, stored)
            return locked

        locked = record.locked_prediction
        if locked is None:
            if record.state is LifecycleState.VERIFIED:
                # Nothing was locked in time; serve a late preliminary
                # prediction without recording it as a lock.
                if record != stored:
                    self.repository.save(record)
                late = self._compute(target_date, (ReasonCode.NO_PRIOR_LOCK,))
                return late.model_copy(update={"lifecycle_state": LifecycleState.VERIFIED})
            locked = self._synthesize_final_lock(record)
            record = record.model_copy(
                update={
                    "locked_prediction": locked,
                    "locked_at": self.clock.now(),
                    "lock_type": LockType.FINAL,
                }
            )

        if record != stored:
            saved = self.repository.save(record)
            self._notify(saved, stored)

        return locked

    def _advance(self, record: LifecycleRecord, target: LifecycleState) -> LifecycleRecord:
        """Step a record forward one state at a time up to ``target``.

        Never moves backward. Entering locked-final freezes any existing
        lock as the final lock.
        """
        if target.order < record.state.order:
            logger.warning(
                "lifecycle_clock_behind_record",
                target_date=record.target_date.isoformat(),
                stored_state=record.state.value,
                clock_state=target.value,
            )
            return record

        history = list(record.history)
        if not history:
            # A record first seen after 18:00 still entered preview before it.
            first_seen = self.schedule.localize(self.clock.now())
            evening = self.schedule.entered_at(record.target_date, LifecycleState.LOCKED_EVENING)
            history.append(StateTransition(state=record.state, at=min(first_seen, evening)))

        while record.state.order < target.order:
            next_state = LIFECYCLE_SEQUENCE[record.state.order + 1]
            entered_at = self.schedule.entered_at(record.target_date, next_state)
            updates: dict[str, Any] = {"state": next_state}

            if next_state is LifecycleState.LOCKED_FINAL and record.locked_prediction is not None:
                updates["locked_prediction"] = self._stamp(
                    record.locked_prediction, next_state, LockType.FINAL
                )
                updates["lock_type"] = LockType.FINAL
                updates["locked_at"] = entered_at

            history.append(StateTransition(state=next_state, at=entered_at))
            record = record.model_copy(update=updates)
            logger.info(
                "lifecycle_transition",
                target_date=record.target_date.isoformat(),
                state=next_state.value,
                at=entered_at.isoformat(),
            )

        return record.model_copy(update={"history": tuple(history)})

    def _compute(
        self,
        target_date: date,
        reasons: tuple[ReasonCode, ...] = (),
    ) -> Prediction:
        """Fetch inputs and score a fresh prediction."""
        try:
            signal = self.signal_provider.fetch_signal(target_date)
        except SignalUnavailableError as e:
            logger.warning(
                "weather_signal_unavailable",
                target_date=target_date.isoformat(),
                error=e.message,
            )
            signal = WeatherSignal()
            reasons = reasons + (ReasonCode.SIGNAL_UNAVAILABLE,)
        return self.analyzer.analyze(signal, target_date, self.clock.now(), reasons)

    def _synthesize_final_lock(self, record: LifecycleRecord) -> Prediction:
        """Preliminary final lock for a date that never got an evening lock."""
        logger.warning(
            "final_lock_synthesized",
            target_date=record.target_date.isoformat(),
            state=record.state.value,
        )
        prediction = self._compute(record.target_date, (ReasonCode.NO_PRIOR_LOCK,))
        return self._stamp(prediction, LifecycleState.LOCKED_FINAL, LockType.FINAL)

    def _apply_lock(
        self,
        record: LifecycleRecord,
        locked: Prediction,
        lock_type: LockType,
    ) -> LifecycleRecord:
        # Only the first evening lock or the final lock sets the lock type.
        new_type = record.lock_type if record.lock_type is not None else lock_type
        if lock_type is LockType.FINAL:
            new_type = LockType.FINAL
        return record.model_copy(
            update={
                "locked_prediction": locked,
                "locked_at": self.clock.now(),
                "lock_type": new_type,
            }
        )

    @staticmethod
    def _check_lock_permitted(record: LifecycleRecord, lock_type: LockType) -> None:
        """Raise LockConflictError if the record's state does not accept the lock."""
        if lock_type is LockType.EVENING and record.state is LifecycleState.LOCKED_EVENING:
            return
        if (
            lock_type is LockType.FINAL
            and record.state is LifecycleState.LOCKED_FINAL
            and record.locked_prediction is None
        ):
            return
        raise LockConflictError(
            f"Cannot apply {lock_type.value} lock to {record.record_key} "
            f"in state {record.state.value}",
            details={
                "record_key": record.record_key,
                "state": record.state.value,
                "lock_type": lock_type.value,
            },
        )

    @staticmethod
    def _stamp(
        prediction: Prediction,
        state: LifecycleState,
        lock_type: LockType,
    ) -> Prediction:
        return prediction.model_copy(update={"lifecycle_state": state, "lock_type": lock_type})

    def _persist_quietly(
        self,
        record: LifecycleRecord,
        stored: LifecycleRecord | None,
    ) -> LifecycleRecord:
        """Persist state advancement only; yield to the stored record on conflict."""
        if stored is None or record == stored:
            return record
        try:
            saved = self.repository.save(record)
        except StaleWriteError:
            return self.repository.get(record.target_date) or record
        self._notify(saved, stored)
        return saved

    def _notify(self, saved: LifecycleRecord, stored: LifecycleRecord | None) -> None:
        """Pass a newly locked prediction to the recorder."""
        previous = stored.locked_prediction if stored is not None else None
        if self.recorder is None or saved.locked_prediction is None:
            return
        if saved.locked_prediction != previous:
            self.recorder.record_prediction(saved.locked_prediction)
