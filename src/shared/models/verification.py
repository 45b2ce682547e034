"""Verification records and accuracy aggregates."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.shared.constants import VERIFICATION_KEY_PREFIX
from src.shared.models.enums import Confidence, LockType, Recommendation
from src.shared.models.prediction import Prediction


def verification_key(target_date: date) -> str:
    """Persistence key of a target date's verification record."""
    return f"{VERIFICATION_KEY_PREFIX}:{target_date.isoformat()}"


class VerificationRecord(BaseModel):
    """Comparison of a locked prediction against observed conditions.

    Created once per target date and never recomputed.
    """

    model_config = ConfigDict(frozen=True)

    target_date: date
    predicted_probability: int = Field(..., ge=0, le=100)
    predicted_recommendation: Recommendation
    predicted_confidence: Confidence
    observed_average_speed: float = Field(..., ge=0)
    observed_direction: float | None = None
    observed_conditions_met: bool
    expected_speed: float = Field(..., ge=0)
    accuracy_score: float = Field(..., ge=0, le=100)
    verified_at: datetime

    @property
    def record_key(self) -> str:
        """Persistence key of this record."""
        return verification_key(self.target_date)

    @property
    def predicted_favorable(self) -> bool:
        """Check if the prediction told the rider to consider going."""
        return self.predicted_recommendation is not Recommendation.SKIP

    @property
    def outcome_correct(self) -> bool:
        """Check if the go/skip call matched what happened."""
        return self.predicted_favorable == self.observed_conditions_met


class PredictionLogEntry(BaseModel):
    """One logged lock event for a target date."""

    model_config = ConfigDict(frozen=True)

    id: int
    target_date: date
    lock_type: LockType | None = None
    prediction: Prediction
    recorded_at: datetime


class TierCalibration(BaseModel):
    """Observed success rate for predictions of one confidence tier."""

    confidence: Confidence
    count: int = 0
    observed_success_pct: float = 0.0
    mean_predicted_probability: float = 0.0


class AccuracySummary(BaseModel):
    """Aggregate accuracy over recent verification records."""

    total: int = 0
    correct: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    accuracy_pct: float = 0.0
    mean_accuracy_score: float = 0.0
    calibration: list[TierCalibration] = Field(default_factory=list)
