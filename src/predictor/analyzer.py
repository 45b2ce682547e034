"""Katabatic analyzer.

Runs a WeatherSignal through the factor registry and scoring engine.
Constructed once at application start and passed to its consumers.
"""

from datetime import date, datetime

from src.predictor.factors import FactorRegistry, build_default_registry
from src.predictor.scoring import ScoringEngine
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.models.enums import ReasonCode
from src.shared.models.prediction import Prediction
from src.shared.models.weather import WeatherSignal

logger = get_logger(__name__)


class KatabaticAnalyzer:
    """Scores weather signals into katabatic predictions."""

    def __init__(
        self,
        registry: FactorRegistry | None = None,
        engine: ScoringEngine | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            registry: Factor evaluators (default five-factor set if None)
            engine: Scoring engine (built from settings and registry if None)
            settings: Settings used for defaults
        """
        settings = settings or get_settings()
        self.registry = registry or build_default_registry(settings)
        self.engine = engine or ScoringEngine(
            settings,
            critical_factors=self.registry.critical_factors,
            required_factors=self.registry.required_factors,
        )
        logger.info("katabatic_analyzer_initialized", factors=self.registry.names)

    def analyze(
        self,
        signal: WeatherSignal,
        target_date: date,
        generated_at: datetime | None = None,
        reasons: tuple[ReasonCode, ...] = (),
    ) -> Prediction:
        """Evaluate all factors and score them.

        Args:
            signal: Normalized weather inputs
            target_date: Dawn patrol date
            generated_at: Scoring timestamp
            reasons: Reason codes to carry onto the prediction

        Returns:
            Fresh Prediction tagged as a preview
        """
        if signal.is_empty:
            logger.warning("weather_signal_empty", target_date=target_date.isoformat())
        factors = self.registry.evaluate(signal)
        return self.engine.score(factors, target_date, generated_at, extra_reasons=reasons)
