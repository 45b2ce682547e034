"""Factor results and predictions.

Both models are frozen: a re-score always produces a new Prediction, and the
lifecycle manager stamps lock metadata through ``model_copy``.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.shared.models.enums import (
    Confidence,
    DataQuality,
    LifecycleState,
    LockType,
    ReasonCode,
    Recommendation,
    ThresholdDirection,
)


class FactorResult(BaseModel):
    """Outcome of evaluating one meteorological factor.

    ``meets`` must agree exactly with ``raw_value`` against ``threshold``;
    a factor without data never meets its threshold.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    raw_value: float | None = None
    threshold: float
    direction: ThresholdDirection
    meets: bool
    score: float = Field(..., ge=0, le=100)
    weight: float = Field(..., ge=0, le=1)
    explanation: str = ""
    penalty_span: float = Field(
        default=1.0,
        gt=0,
        description="Distance from threshold at which the unmet penalty is total",
    )

    @model_validator(mode="after")
    def validate_meets(self) -> "FactorResult":
        """Keep the threshold flag consistent with the raw value."""
        expected = self.satisfies(self.raw_value)
        if self.meets != expected:
            raise ValueError(
                f"{self.name}: meets={self.meets} disagrees with raw value "
                f"{self.raw_value} against threshold {self.threshold}"
            )
        return self

    @property
    def has_data(self) -> bool:
        """Check if the factor was evaluated from real input."""
        return self.raw_value is not None

    def satisfies(self, value: float | None) -> bool:
        """Check whether a raw value satisfies this factor's threshold.

        Args:
            value: Raw value to test, or None for missing data

        Returns:
            True if the threshold is met
        """
        if value is None:
            return False
        if self.direction is ThresholdDirection.AT_MOST:
            return value <= self.threshold
        return value >= self.threshold

    def shortfall(self) -> float:
        """Fraction (0-1) of the penalty span by which the raw value misses the threshold.

        Returns 0.0 for met factors and factors without data.
        """
        if self.raw_value is None or self.meets:
            return 0.0
        distance = abs(self.raw_value - self.threshold)
        return min(1.0, distance / self.penalty_span)


class Prediction(BaseModel):
    """Scored katabatic prediction for one target date."""

    model_config = ConfigDict(frozen=True)

    target_date: date
    probability: int = Field(..., ge=0, le=100)
    confidence: Confidence
    confidence_score: float = Field(..., ge=0, le=100)
    recommendation: Recommendation
    factors: tuple[FactorResult, ...]
    factors_met: int = Field(..., ge=0)
    limiting_factor: str | None = None
    summary: str
    explanation: str
    generated_at: datetime
    data_quality: DataQuality
    reasons: tuple[ReasonCode, ...] = ()
    lifecycle_state: LifecycleState = LifecycleState.PREVIEW
    lock_type: LockType | None = None

    @property
    def is_locked(self) -> bool:
        """Check if this prediction was produced by a lock."""
        return self.lock_type is not None

    @property
    def predicts_favorable(self) -> bool:
        """Check if the rider was told conditions may be worth going for."""
        return self.recommendation is not Recommendation.SKIP

    def factor(self, name: str) -> FactorResult | None:
        """Look up a factor result by name."""
        for result in self.factors:
            if result.name == name:
                return result
        return None
