"""Core constants for the katabatic prediction service.

Names and keys shared by the predictor, lifecycle and tracking packages.
Tunable numbers live in settings, not here.
"""

from typing import Final

# Factor names
PRECIPITATION: Final[str] = "precipitation"
SKY_CLARITY: Final[str] = "sky_clarity"
PRESSURE_CHANGE: Final[str] = "pressure_change"
TEMPERATURE_DIFFERENTIAL: Final[str] = "temperature_differential"
TRANSPORT_WIND: Final[str] = "transport_wind"

# Factors whose absence caps confidence at medium (transport wind is optional)
REQUIRED_FACTORS: Final[frozenset[str]] = frozenset(
    {PRECIPITATION, SKY_CLARITY, PRESSURE_CHANGE, TEMPERATURE_DIFFERENTIAL}
)

# Short labels used in summaries
FACTOR_LABELS: Final[dict[str, str]] = {
    PRECIPITATION: "rain",
    SKY_CLARITY: "clear sky",
    PRESSURE_CHANGE: "pressure",
    TEMPERATURE_DIFFERENTIAL: "temp diff",
    TRANSPORT_WIND: "transport wind",
}

# Persistence key prefixes
LIFECYCLE_KEY_PREFIX: Final[str] = "lifecycle"
VERIFICATION_KEY_PREFIX: Final[str] = "verification"

# Scores
MIN_SCORE: Final[float] = 0.0
MAX_SCORE: Final[float] = 100.0
WEIGHT_TOLERANCE: Final[float] = 1e-6
