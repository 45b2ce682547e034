"""Pytest configuration and shared fixtures."""

import os
from datetime import date, datetime
from typing import Iterator

import pytest
import pytz
import structlog

from src.predictor.analyzer import KatabaticAnalyzer
from src.shared.config.settings import Settings
from src.shared.db.connection import DatabaseManager
from src.shared.db.repositories import (
    LifecycleRepository,
    PredictionLogRepository,
    VerificationRepository,
)
from src.shared.errors import SignalUnavailableError
from src.shared.models.enums import FlowOrganization
from src.shared.models.prediction import Prediction
from src.shared.models.weather import TransportWind, WeatherSignal

DENVER = pytz.timezone("America/Denver")

# Dawn patrol date used across lifecycle tests; its eve is 2026-10-19.
TARGET_DATE = date(2026, 10, 20)


class ManualClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, moment: datetime) -> None:
        self._now = self._localize(moment)

    @staticmethod
    def _localize(moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return DENVER.localize(moment)
        return moment

    def now(self) -> datetime:
        return self._now

    def set(self, moment: datetime) -> None:
        """Jump to a moment; naive values are Denver local time."""
        self._now = self._localize(moment)


class StaticSignalProvider:
    """Weather provider returning a fixed signal and counting calls."""

    def __init__(self, signal: WeatherSignal | None = None) -> None:
        self.signal = signal or WeatherSignal()
        self.calls = 0
        self.unavailable = False

    def fetch_signal(self, target_date: date) -> WeatherSignal:
        self.calls += 1
        if self.unavailable:
            raise SignalUnavailableError(
                "Upstream timed out",
                details={"target_date": target_date.isoformat()},
            )
        return self.signal


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: end-to-end flows against a local sqlite database"
    )


@pytest.fixture(autouse=True)
def reset_settings_env() -> Iterator[None]:
    """Reset environment variables before each test."""
    # Store original env vars
    original_env = os.environ.copy()

    # Clear settings-related env vars
    setting_names = {name.upper() for name in Settings.model_fields}
    for key in list(os.environ.keys()):
        if key.upper() in setting_names:
            del os.environ[key]

    yield

    # Restore original env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_settings_singleton() -> Iterator[None]:
    """Reset the settings singleton between tests."""
    from src.shared.config import settings as settings_module

    settings_module._settings = None

    yield

    settings_module._settings = None


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults so capture_logs sees every event."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def db() -> Iterator[DatabaseManager]:
    """In-memory sqlite database with the schema created."""
    manager = DatabaseManager(database_url="sqlite://")
    manager.create_schema()
    yield manager
    manager.close()


@pytest.fixture
def lifecycle_repo(db: DatabaseManager) -> LifecycleRepository:
    return LifecycleRepository(db)


@pytest.fixture
def verification_repo(db: DatabaseManager) -> VerificationRepository:
    return VerificationRepository(db)


@pytest.fixture
def log_repo(db: DatabaseManager) -> PredictionLogRepository:
    return PredictionLogRepository(db)


@pytest.fixture
def clock() -> ManualClock:
    """Clock parked at noon on the eve of TARGET_DATE."""
    return ManualClock(datetime(2026, 10, 19, 12, 0))


@pytest.fixture
def favorable_signal() -> WeatherSignal:
    """Clear, dry, strongly inverted night with no transport reading."""
    return WeatherSignal(
        precipitation_analysis_pct=3.0,
        precipitation_target_pct=2.0,
        sky_clear_pct=85.0,
        pressure_change=3.5,
        temperature_differential=13.0,
        source="test",
    )


@pytest.fixture
def complete_signal(favorable_signal: WeatherSignal) -> WeatherSignal:
    """Favorable signal including an organized transport wind reading."""
    return favorable_signal.model_copy(
        update={"transport_wind": TransportWind(speed=12.0, organization=FlowOrganization.ORGANIZED)}
    )


@pytest.fixture
def poor_signal() -> WeatherSignal:
    """Wet, cloudy night with a weak inversion."""
    return WeatherSignal(
        precipitation_analysis_pct=60.0,
        precipitation_target_pct=45.0,
        sky_clear_pct=30.0,
        pressure_change=0.4,
        temperature_differential=3.0,
        transport_wind=TransportWind(speed=28.0, organization=FlowOrganization.DISORGANIZED),
        source="test",
    )


@pytest.fixture
def provider(favorable_signal: WeatherSignal) -> StaticSignalProvider:
    return StaticSignalProvider(favorable_signal)


@pytest.fixture
def prediction(settings: Settings, favorable_signal: WeatherSignal) -> Prediction:
    """Preview prediction for TARGET_DATE scored from the favorable signal."""
    analyzer = KatabaticAnalyzer(settings=settings)
    return analyzer.analyze(
        favorable_signal,
        TARGET_DATE,
        generated_at=DENVER.localize(datetime(2026, 10, 19, 18, 30)),
    )
