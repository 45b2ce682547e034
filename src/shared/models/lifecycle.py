"""Lifecycle record persisted once per target date."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.shared.constants import LIFECYCLE_KEY_PREFIX
from src.shared.models.enums import LifecycleState, LockType
from src.shared.models.prediction import Prediction


def lifecycle_key(target_date: date) -> str:
    """Persistence key of a target date's lifecycle record."""
    return f"{LIFECYCLE_KEY_PREFIX}:{target_date.isoformat()}"


class StateTransition(BaseModel):
    """One visited lifecycle state and when it was entered."""

    model_config = ConfigDict(frozen=True)

    state: LifecycleState
    at: datetime


class LifecycleRecord(BaseModel):
    """Lifecycle of the prediction for one target date.

    Owned by the PredictionStateManager. ``version`` increments on every
    persisted write and backs the optimistic concurrency check.
    """

    model_config = ConfigDict(frozen=True)

    target_date: date
    state: LifecycleState = LifecycleState.PREVIEW
    locked_prediction: Prediction | None = None
    locked_at: datetime | None = None
    lock_type: LockType | None = None
    version: int = Field(default=0, ge=0)
    history: tuple[StateTransition, ...] = ()

    @property
    def record_key(self) -> str:
        """Persistence key of this record."""
        return lifecycle_key(self.target_date)

    @property
    def is_persisted(self) -> bool:
        """Check if the record has been written at least once."""
        return self.version > 0

    @property
    def visited_states(self) -> list[LifecycleState]:
        """States visited so far, in order."""
        return [transition.state for transition in self.history]
