"""Unit tests for KatabaticAnalyzer."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

from structlog.testing import capture_logs

from src.predictor.analyzer import KatabaticAnalyzer
from src.shared.config.settings import Settings
from src.shared.models.enums import LifecycleState, ReasonCode, Recommendation
from src.shared.models.weather import WeatherSignal

TARGET = date(2026, 10, 20)


class TestKatabaticAnalyzer:
    """Test suite for KatabaticAnalyzer."""

    def test_analyze_returns_preview(self, settings: Settings, favorable_signal: WeatherSignal) -> None:
        """Test a fresh analysis is an unlocked preview for the target date."""
        analyzer = KatabaticAnalyzer(settings=settings)

        prediction = analyzer.analyze(favorable_signal, TARGET)

        assert prediction.target_date == TARGET
        assert prediction.lifecycle_state is LifecycleState.PREVIEW
        assert prediction.lock_type is None
        assert prediction.recommendation is Recommendation.GO
        assert len(prediction.factors) == 5

    def test_analyze_is_deterministic(self, settings: Settings, favorable_signal: WeatherSignal) -> None:
        """Test the same inputs always produce the same prediction."""
        analyzer = KatabaticAnalyzer(settings=settings)
        at = datetime(2026, 10, 19, 19, 0, tzinfo=timezone.utc)

        assert analyzer.analyze(favorable_signal, TARGET, at) == analyzer.analyze(
            favorable_signal, TARGET, at
        )

    def test_reasons_carried(self, settings: Settings, favorable_signal: WeatherSignal) -> None:
        """Test caller reasons end up on the prediction."""
        analyzer = KatabaticAnalyzer(settings=settings)

        prediction = analyzer.analyze(
            favorable_signal, TARGET, reasons=(ReasonCode.SIGNAL_UNAVAILABLE,)
        )

        assert ReasonCode.SIGNAL_UNAVAILABLE in prediction.reasons

    def test_empty_signal_logs_warning(self, settings: Settings) -> None:
        """Test an empty signal is scored with a warning."""
        analyzer = KatabaticAnalyzer(settings=settings)

        with capture_logs() as logs:
            prediction = analyzer.analyze(WeatherSignal(), TARGET)

        assert prediction.recommendation is Recommendation.SKIP
        assert any(log["event"] == "weather_signal_empty" for log in logs)

    def test_uses_injected_components(self, settings: Settings) -> None:
        """Test injected registry and engine are used."""
        registry = MagicMock()
        registry.evaluate.return_value = ["factor"]
        engine = MagicMock()

        analyzer = KatabaticAnalyzer(registry=registry, engine=engine, settings=settings)
        result = analyzer.analyze(WeatherSignal(sky_clear_pct=80.0), TARGET)

        registry.evaluate.assert_called_once()
        engine.score.assert_called_once_with(["factor"], TARGET, None, extra_reasons=())
        assert result is engine.score.return_value
