"""Domain models for the katabatic prediction service."""

from src.shared.models.enums import (
    LIFECYCLE_SEQUENCE,
    Confidence,
    DataQuality,
    FlowOrganization,
    LifecycleState,
    LockType,
    PressureTrend,
    ReasonCode,
    Recommendation,
    ThresholdDirection,
)
from src.shared.models.lifecycle import LifecycleRecord, StateTransition, lifecycle_key
from src.shared.models.prediction import FactorResult, Prediction
from src.shared.models.verification import (
    AccuracySummary,
    PredictionLogEntry,
    TierCalibration,
    VerificationRecord,
    verification_key,
)
from src.shared.models.weather import ObservedSignal, TransportWind, WeatherSignal

__all__ = [
    # Enums
    "Confidence",
    "DataQuality",
    "FlowOrganization",
    "LifecycleState",
    "LIFECYCLE_SEQUENCE",
    "LockType",
    "PressureTrend",
    "ReasonCode",
    "Recommendation",
    "ThresholdDirection",
    # Inputs
    "WeatherSignal",
    "TransportWind",
    "ObservedSignal",
    # Predictions
    "FactorResult",
    "Prediction",
    # Lifecycle
    "LifecycleRecord",
    "StateTransition",
    "lifecycle_key",
    # Verification
    "VerificationRecord",
    "PredictionLogEntry",
    "AccuracySummary",
    "TierCalibration",
    "verification_key",
]
