"""Application settings and environment configuration.

Uses pydantic-settings to load and validate configuration from environment
variables with type safety and validation. Every factor threshold, weight,
bonus, confidence rule and lifecycle checkpoint lives here so the scoring and
lifecycle code never hard-codes them.
"""

from datetime import time
from typing import Literal

import pytz
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared.constants import (
    PRECIPITATION,
    PRESSURE_CHANGE,
    SKY_CLARITY,
    TEMPERATURE_DIFFERENTIAL,
    TRANSPORT_WIND,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Defaults reflect the current field calibration for the dawn-patrol site.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///katabatic.db",
        description="SQLAlchemy URL of the prediction store",
    )
    db_pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Database connection pool size (non-sqlite only)",
    )
    db_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum overflow connections beyond pool size",
    )
    db_pool_timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Connection pool timeout in seconds",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )

    # Location
    timezone: str = Field(
        default="America/Denver",
        description="IANA timezone used for all lifecycle checkpoints",
    )

    # Precipitation factor (percent)
    precipitation_full_score_pct: float = Field(default=5.0, ge=0, le=100)
    precipitation_zero_score_pct: float = Field(default=21.0, ge=0, le=100)
    precipitation_max_pct: float = Field(
        default=20.0,
        ge=0,
        le=100,
        description="Precipitation probability at or below which the factor is met",
    )

    # Sky clarity factor (percent clear during the cooling window)
    sky_clear_full_score_pct: float = Field(default=80.0, ge=0, le=100)
    sky_clear_zero_score_pct: float = Field(default=60.0, ge=0, le=100)
    sky_clear_min_pct: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Clear-sky fraction at or above which the factor is met",
    )

    # Pressure change factor (magnitude, hPa)
    pressure_change_full_score: float = Field(default=3.0, ge=0)
    pressure_change_zero_score: float = Field(default=1.0, ge=0)
    pressure_change_min: float = Field(
        default=2.0,
        ge=0,
        description="Pressure change magnitude at or above which the factor is met",
    )
    pressure_stable_below: float = Field(
        default=1.0,
        ge=0,
        description="Changes smaller than this are reported as a stable trend",
    )

    # Temperature differential factor (degrees F, valley minus mountain)
    temp_diff_full_score: float = Field(default=12.0)
    temp_diff_zero_score: float = Field(default=6.0)
    temp_diff_min: float = Field(
        default=9.0,
        description="Temperature differential at or above which the factor is met",
    )

    # Transport wind factor
    transport_wind_min_speed: float = Field(
        default=5.0,
        ge=0,
        description="Below this the upper flow provides no forcing",
    )
    transport_wind_max_speed: float = Field(
        default=20.0,
        ge=0,
        description="Above this the upper flow disorganizes the drainage",
    )
    transport_wind_overspeed_penalty: float = Field(
        default=10.0,
        ge=0,
        description="Index points lost per unit of speed above the favorable band",
    )
    transport_wind_mixed_multiplier: float = Field(default=0.6, ge=0, le=1)
    transport_wind_disorganized_multiplier: float = Field(default=0.3, ge=0, le=1)
    transport_wind_min_index: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Organization index at or above which the factor is met",
    )
    neutral_factor_score: float = Field(
        default=50.0,
        ge=0,
        le=100,
        description="Score assigned to a factor whose input is missing",
    )

    # Factor weights (must sum to 1.0)
    weight_precipitation: float = Field(default=0.20, ge=0, le=1)
    weight_sky_clarity: float = Field(default=0.20, ge=0, le=1)
    weight_pressure_change: float = Field(default=0.15, ge=0, le=1)
    weight_temperature_differential: float = Field(default=0.30, ge=0, le=1)
    weight_transport_wind: float = Field(default=0.15, ge=0, le=1)

    # Bonuses (percentage points)
    multi_factor_bonus: float = Field(default=20.0, ge=0, le=100)
    multi_factor_bonus_min_met: int = Field(default=4, ge=1)
    all_factors_bonus: float = Field(default=25.0, ge=0, le=100)

    # Confidence tiers
    high_confidence_min_factors: int = Field(default=3, ge=1)
    high_confidence_min_probability: float = Field(default=75.0, ge=0, le=100)
    medium_confidence_min_factors: int = Field(default=2, ge=1)
    medium_confidence_min_probability: float = Field(default=50.0, ge=0, le=100)
    min_valid_factors: int = Field(
        default=2,
        ge=1,
        description="Fewer factors with data than this forces low confidence",
    )
    learning_mode: bool = Field(
        default=False,
        description="Cap confidence while the model is uncalibrated",
    )
    confidence_cap: float = Field(default=65.0, ge=0, le=100)

    # Recommendation thresholds
    go_probability_threshold: float = Field(default=75.0, ge=0, le=100)
    maybe_probability_threshold: float = Field(default=60.0, ge=0, le=100)

    # Lifecycle checkpoints (local time)
    evening_lock_time: time = Field(
        default=time(18, 0),
        description="Evening lock on the eve of the target date",
    )
    final_lock_time: time = Field(
        default=time(23, 0),
        description="Final lock on the eve of the target date",
    )
    active_time: time = Field(
        default=time(6, 0),
        description="Dawn patrol window opens on the target date",
    )
    verified_time: time = Field(
        default=time(8, 0),
        description="Dawn patrol window closes on the target date",
    )

    # Retention
    lifecycle_retention_days: int = Field(default=7, ge=1)
    verification_retention_days: int = Field(default=7, ge=1)

    # Verification
    success_wind_speed: float = Field(
        default=15.0,
        ge=0,
        description="Average speed (mph) at which the session counts as good",
    )
    downslope_direction_start: float = Field(default=270.0, ge=0, lt=360)
    downslope_direction_end: float = Field(default=90.0, ge=0, lt=360)
    expected_speed_go: float = Field(default=18.0, ge=0)
    expected_speed_maybe: float = Field(default=12.0, ge=0)
    expected_speed_skip: float = Field(default=5.0, ge=0)
    speed_tolerance: float = Field(
        default=5.0,
        gt=0,
        description="Standard deviation (mph) used when scoring speed closeness",
    )
    outcome_weight: float = Field(
        default=0.6,
        ge=0,
        le=1,
        description="Share of the accuracy score driven by the go/skip outcome",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL uses a supported scheme."""
        if not v.startswith(("sqlite://", "postgresql://", "postgresql+psycopg2://")):
            raise ValueError("Database URL must use sqlite:// or postgresql:// scheme")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure timezone is a known IANA identifier."""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @model_validator(mode="after")
    def validate_weights(self) -> "Settings":
        """Ensure factor weights sum to 1.0."""
        total = sum(self.factor_weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Factor weights must sum to 1.0, got {total:.4f}")
        return self

    @model_validator(mode="after")
    def validate_checkpoints(self) -> "Settings":
        """Ensure lifecycle checkpoints are ordered within their day."""
        if not self.evening_lock_time < self.final_lock_time:
            raise ValueError("evening_lock_time must precede final_lock_time")
        if not self.active_time < self.verified_time:
            raise ValueError("active_time must precede verified_time")
        return self

    @property
    def factor_weights(self) -> dict[str, float]:
        """Factor weights keyed by factor name."""
        return {
            PRECIPITATION: self.weight_precipitation,
            SKY_CLARITY: self.weight_sky_clarity,
            PRESSURE_CHANGE: self.weight_pressure_change,
            TEMPERATURE_DIFFERENTIAL: self.weight_temperature_differential,
            TRANSPORT_WIND: self.weight_transport_wind,
        }


# Global settings instance - will be lazy loaded or use defaults
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

