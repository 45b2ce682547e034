"""Normalized weather inputs consumed by the predictor and tracker.

Produced by external weather collaborators from raw provider payloads.
All values are already unit-normalized; any field may be None when the
provider could not supply it.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.shared.models.enums import FlowOrganization


class TransportWind(BaseModel):
    """Upper-level transport wind / mixing signal."""

    model_config = ConfigDict(frozen=True)

    speed: float = Field(..., ge=0, description="Transport wind speed in mph")
    organization: FlowOrganization = Field(
        default=FlowOrganization.MIXED,
        description="Qualitative organization of the flow",
    )


class WeatherSignal(BaseModel):
    """One normalized snapshot of the inputs needed for scoring.

    Immutable once constructed.
    """

    model_config = ConfigDict(frozen=True)

    precipitation_analysis_pct: float | None = Field(
        None, ge=0, le=100, description="Precipitation probability over the analysis window"
    )
    precipitation_target_pct: float | None = Field(
        None, ge=0, le=100, description="Precipitation probability over the dawn patrol window"
    )
    sky_clear_pct: float | None = Field(
        None, ge=0, le=100, description="Clear-sky fraction during the pre-dawn cooling window"
    )
    pressure_change: float | None = Field(
        None, description="Signed pressure change over the cooling window (hPa)"
    )
    temperature_differential: float | None = Field(
        None, description="Valley minus mountain temperature (degrees F)"
    )
    transport_wind: TransportWind | None = Field(
        None, description="Optional upper-level flow signal"
    )
    captured_at: datetime | None = Field(None, description="When the inputs were captured")
    source: str = Field(default="unknown", description="Collaborator that produced the signal")

    @property
    def precipitation_pct(self) -> float | None:
        """Worse of the analysis-window and target-window precipitation chances."""
        values = [
            v
            for v in (self.precipitation_analysis_pct, self.precipitation_target_pct)
            if v is not None
        ]
        return max(values) if values else None

    @property
    def is_empty(self) -> bool:
        """Check if no scoring input is present at all."""
        return (
            self.precipitation_pct is None
            and self.sky_clear_pct is None
            and self.pressure_change is None
            and self.temperature_differential is None
            and self.transport_wind is None
        )


class ObservedSignal(BaseModel):
    """Actual wind over the dawn patrol window, from a live-data collaborator."""

    model_config = ConfigDict(frozen=True)

    average_speed: float = Field(..., ge=0, description="Average wind speed in mph")
    direction: float | None = Field(
        None, ge=0, lt=360, description="Average wind direction in degrees"
    )
    max_speed: float | None = Field(None, ge=0, description="Peak wind speed in mph")
    sample_count: int = Field(default=0, ge=0, description="Observations averaged")
    source: str = Field(default="unknown", description="Station or report source")
