"""Enumerations shared by predictions, lifecycle records and verification."""

from enum import Enum


class Confidence(Enum):
    """Coarse reliability tier of a prediction."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal rank for tier comparisons (low < medium < high)."""
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class Recommendation(Enum):
    """Action suggested to the rider."""

    GO = "go"
    MAYBE = "maybe"
    SKIP = "skip"


class DataQuality(Enum):
    """Completeness of the inputs behind a prediction."""

    PRELIMINARY = "preliminary"
    COMPLETE = "complete"


class ThresholdDirection(Enum):
    """Which side of the threshold satisfies a factor."""

    AT_MOST = "at_most"
    AT_LEAST = "at_least"


class FlowOrganization(Enum):
    """Qualitative organization of the upper-level transport flow."""

    ORGANIZED = "organized"
    MIXED = "mixed"
    DISORGANIZED = "disorganized"


class PressureTrend(Enum):
    """Direction of the overnight pressure change."""

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class ReasonCode(Enum):
    """Recoverable conditions recorded on a prediction."""

    MISSING_SIGNAL = "missing_signal"
    INCOMPLETE_CRITICAL_SIGNAL = "incomplete_critical_signal"
    INSUFFICIENT_DATA = "insufficient_data"
    SIGNAL_UNAVAILABLE = "signal_unavailable"
    LEARNING_MODE_CAP = "learning_mode_cap"
    NO_PRIOR_LOCK = "no_prior_lock"


class LifecycleState(Enum):
    """Lifecycle states of a target date, in the only order they may be visited."""

    PREVIEW = "preview"
    LOCKED_EVENING = "locked-evening"
    LOCKED_FINAL = "locked-final"
    ACTIVE = "active"
    VERIFIED = "verified"

    @property
    def order(self) -> int:
        """Position in the lifecycle sequence."""
        return LIFECYCLE_SEQUENCE.index(self)

    @property
    def is_frozen(self) -> bool:
        """Whether the locked prediction can no longer change."""
        return self.order >= LifecycleState.LOCKED_FINAL.order


LIFECYCLE_SEQUENCE: tuple[LifecycleState, ...] = (
    LifecycleState.PREVIEW,
    LifecycleState.LOCKED_EVENING,
    LifecycleState.LOCKED_FINAL,
    LifecycleState.ACTIVE,
    LifecycleState.VERIFIED,
)


class LockType(Enum):
    """Which checkpoint produced a lock."""

    EVENING = "evening"
    FINAL = "final"
