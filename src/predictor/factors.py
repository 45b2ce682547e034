"""Factor evaluators for katabatic wind prediction.

Each evaluator turns one reading of a WeatherSignal into a FactorResult with
a 0-100 score and a threshold flag. Evaluators are side-effect free and
independent of each other; the FactorRegistry holds them in evaluation order
and checks at construction that their weights sum to 1.0.
"""

from typing import Iterator

from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import (
    FACTOR_LABELS,
    MAX_SCORE,
    MIN_SCORE,
    PRECIPITATION,
    PRESSURE_CHANGE,
    SKY_CLARITY,
    TEMPERATURE_DIFFERENTIAL,
    TRANSPORT_WIND,
    WEIGHT_TOLERANCE,
)
from src.shared.errors import ErrorCode, FactorConfigurationError
from src.shared.models.enums import FlowOrganization, PressureTrend, ThresholdDirection
from src.shared.models.prediction import FactorResult
from src.shared.models.weather import WeatherSignal

logger = get_logger(__name__)


def linear_score(value: float, zero_at: float, full_at: float) -> float:
    """Score a value linearly between its zero-score and full-score points.

    Works in either direction: ``full_at`` may be below ``zero_at`` for
    factors where lower readings are better.

    Args:
        value: Raw reading
        zero_at: Reading that scores 0
        full_at: Reading that scores 100

    Returns:
        Score clamped to 0-100

    Example:
        >>> linear_score(13.0, zero_at=21.0, full_at=5.0)
        50.0
    """
    if full_at == zero_at:
        return MAX_SCORE if value == full_at else MIN_SCORE
    fraction = (value - zero_at) / (full_at - zero_at)
    return max(MIN_SCORE, min(MAX_SCORE, fraction * MAX_SCORE))


def pressure_trend(change: float, stable_below: float) -> PressureTrend:
    """Classify a signed pressure change."""
    if abs(change) < stable_below:
        return PressureTrend.STABLE
    return PressureTrend.RISING if change > 0 else PressureTrend.FALLING


class FactorEvaluator:
    """Base class for factor evaluators.

    Subclasses implement ``extract()`` and ``explain()``; the base class
    handles linear scoring, the threshold flag and the neutral fallback for
    missing input.
    """

    name: str = ""
    direction: ThresholdDirection = ThresholdDirection.AT_LEAST
    critical: bool = False
    optional: bool = False

    def __init__(
        self,
        weight: float,
        threshold: float,
        full_score_at: float,
        zero_score_at: float,
        neutral_score: float = 50.0,
    ) -> None:
        """Initialize evaluator.

        Args:
            weight: Share of the overall probability (0-1)
            threshold: Raw value at which the factor is met
            full_score_at: Raw value scoring 100
            zero_score_at: Raw value scoring 0
            neutral_score: Score used when the input is missing
        """
        self.weight = weight
        self.threshold = threshold
        self.full_score_at = full_score_at
        self.zero_score_at = zero_score_at
        self.neutral_score = neutral_score

    @property
    def label(self) -> str:
        """Short human-readable factor label."""
        return FACTOR_LABELS.get(self.name, self.name)

    @property
    def penalty_span(self) -> float:
        """Distance below threshold at which an unmet factor contributes nothing."""
        return abs(self.threshold - self.zero_score_at) or 1.0

    def extract(self, signal: WeatherSignal) -> float | None:
        """Pull this factor's raw value out of the signal.

        Raises:
            NotImplementedError: Must be implemented by subclass
        """
        raise NotImplementedError("Subclasses must implement extract()")

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        """Describe the reading for presentation.

        Raises:
            NotImplementedError: Must be implemented by subclass
        """
        raise NotImplementedError("Subclasses must implement explain()")

    def score_value(self, raw_value: float) -> float:
        """Score a raw value on the 0-100 scale."""
        return linear_score(raw_value, self.zero_score_at, self.full_score_at)

    def satisfies(self, raw_value: float) -> bool:
        """Check if a raw value meets the threshold."""
        if self.direction is ThresholdDirection.AT_MOST:
            return raw_value <= self.threshold
        return raw_value >= self.threshold

    def evaluate(self, signal: WeatherSignal) -> FactorResult:
        """Evaluate this factor against a weather signal.

        Args:
            signal: Normalized weather inputs

        Returns:
            FactorResult; neutral-scored and unmet if the input is missing
        """
        raw_value = self.extract(signal)
        if raw_value is None:
            return self.missing()

        meets = self.satisfies(raw_value)
        return FactorResult(
            name=self.name,
            raw_value=raw_value,
            threshold=self.threshold,
            direction=self.direction,
            meets=meets,
            score=round(self.score_value(raw_value), 2),
            weight=self.weight,
            explanation=self.explain(raw_value, meets, signal),
            penalty_span=self.penalty_span,
        )

    def missing(self) -> FactorResult:
        """Neutral result for a factor whose input is absent."""
        logger.debug("factor_input_missing", factor=self.name)
        return FactorResult(
            name=self.name,
            raw_value=None,
            threshold=self.threshold,
            direction=self.direction,
            meets=False,
            score=self.neutral_score,
            weight=self.weight,
            explanation=f"No {self.label} data available; scored neutral.",
            penalty_span=self.penalty_span,
        )


class PrecipitationFactor(FactorEvaluator):
    """Precipitation chance; the worse of the analysis and dawn windows."""

    name = PRECIPITATION
    direction = ThresholdDirection.AT_MOST

    def extract(self, signal: WeatherSignal) -> float | None:
        return signal.precipitation_pct

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        verdict = "dry enough" if meets else "too wet"
        return (
            f"Precipitation {raw_value:.0f}% chance, {verdict} "
            f"(needs <= {self.threshold:.0f}%)."
        )


class SkyClarityFactor(FactorEvaluator):
    """Clear-sky fraction during the pre-dawn radiational cooling window."""

    name = SKY_CLARITY

    def extract(self, signal: WeatherSignal) -> float | None:
        return signal.sky_clear_pct

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        verdict = "good radiational cooling" if meets else "clouds limit cooling"
        return (
            f"Clear sky {raw_value:.0f}% of the cooling window, {verdict} "
            f"(needs >= {self.threshold:.0f}%)."
        )


class PressureChangeFactor(FactorEvaluator):
    """Magnitude of the overnight pressure change."""

    name = PRESSURE_CHANGE

    def __init__(
        self,
        weight: float,
        threshold: float,
        full_score_at: float,
        zero_score_at: float,
        neutral_score: float = 50.0,
        stable_below: float = 1.0,
    ) -> None:
        super().__init__(weight, threshold, full_score_at, zero_score_at, neutral_score)
        self.stable_below = stable_below

    def extract(self, signal: WeatherSignal) -> float | None:
        if signal.pressure_change is None:
            return None
        return abs(signal.pressure_change)

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        change = signal.pressure_change or 0.0
        trend = pressure_trend(change, self.stable_below)
        return (
            f"Pressure {change:+.1f} hPa ({trend.value}) over the cooling window "
            f"(needs >= {self.threshold:.1f} change)."
        )


class TemperatureDifferentialFactor(FactorEvaluator):
    """Valley minus mountain temperature; the most decisive factor."""

    name = TEMPERATURE_DIFFERENTIAL
    critical = True

    def extract(self, signal: WeatherSignal) -> float | None:
        return signal.temperature_differential

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        verdict = "strong cold-air drainage" if meets else "weak drainage gradient"
        return (
            f"Temperature differential {raw_value:.1f}°F, {verdict} "
            f"(needs >= {self.threshold:.1f}°F)."
        )


class TransportWindFactor(FactorEvaluator):
    """Upper-level transport flow organization.

    The raw value is an organization index: a speed component (full inside
    the favorable band, fading toward calm or with overspeed) multiplied by
    the organization of the flow.
    """

    name = TRANSPORT_WIND
    optional = True

    def __init__(
        self,
        weight: float,
        threshold: float,
        min_speed: float,
        max_speed: float,
        overspeed_penalty: float = 10.0,
        mixed_multiplier: float = 0.6,
        disorganized_multiplier: float = 0.3,
        neutral_score: float = 50.0,
    ) -> None:
        """Initialize transport wind evaluator.

        Args:
            weight: Share of the overall probability (0-1)
            threshold: Organization index at which the factor is met
            min_speed: Lower edge of the favorable speed band
            max_speed: Upper edge of the favorable speed band
            overspeed_penalty: Index points lost per unit above max_speed
            mixed_multiplier: Index multiplier for mixed flow
            disorganized_multiplier: Index multiplier for disorganized flow
            neutral_score: Score used when no transport signal is available
        """
        super().__init__(
            weight=weight,
            threshold=threshold,
            full_score_at=MAX_SCORE,
            zero_score_at=MIN_SCORE,
            neutral_score=neutral_score,
        )
        self.min_speed = min_speed
        self.max_speed = max_speed
        self.overspeed_penalty = overspeed_penalty
        self.multipliers = {
            FlowOrganization.ORGANIZED: 1.0,
            FlowOrganization.MIXED: mixed_multiplier,
            FlowOrganization.DISORGANIZED: disorganized_multiplier,
        }

    def extract(self, signal: WeatherSignal) -> float | None:
        wind = signal.transport_wind
        if wind is None:
            return None

        if wind.speed < self.min_speed:
            speed_component = MAX_SCORE * wind.speed / self.min_speed if self.min_speed else MAX_SCORE
        elif wind.speed > self.max_speed:
            speed_component = MAX_SCORE - (wind.speed - self.max_speed) * self.overspeed_penalty
        else:
            speed_component = MAX_SCORE

        index = max(MIN_SCORE, speed_component) * self.multipliers[wind.organization]
        return round(index, 2)

    def explain(self, raw_value: float, meets: bool, signal: WeatherSignal) -> str:
        wind = signal.transport_wind
        if wind is None:
            return f"No {self.label} data available."
        if wind.speed < self.min_speed:
            band = "too light to force drainage"
        elif wind.speed > self.max_speed:
            band = "strong enough to disrupt drainage"
        else:
            band = "within the favorable band"
        return (
            f"{wind.organization.value.capitalize()} transport flow at {wind.speed:.0f} mph, "
            f"{band} (index {raw_value:.0f}, needs >= {self.threshold:.0f})."
        )


class FactorRegistry:
    """Ordered, validated set of factor evaluators.

    Raises FactorConfigurationError at construction if the registry is
    empty, names repeat, or weights do not sum to 1.0.
    """

    def __init__(self, evaluators: list[FactorEvaluator]) -> None:
        """Initialize registry.

        Args:
            evaluators: Evaluators in presentation order

        Raises:
            FactorConfigurationError: If the evaluator set is invalid
        """
        if not evaluators:
            raise FactorConfigurationError(
                "Factor registry requires at least one evaluator",
                error_code=ErrorCode.EMPTY_REGISTRY,
            )

        names = [evaluator.name for evaluator in evaluators]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise FactorConfigurationError(
                f"Duplicate factor evaluators: {duplicates}",
                error_code=ErrorCode.DUPLICATE_FACTOR,
                details={"duplicates": duplicates},
            )

        total_weight = sum(evaluator.weight for evaluator in evaluators)
        if abs(total_weight - 1.0) > WEIGHT_TOLERANCE:
            raise FactorConfigurationError(
                f"Factor weights must sum to 1.0, got {total_weight:.4f}",
                details={"weights": {e.name: e.weight for e in evaluators}},
            )

        self._evaluators = tuple(evaluators)
        logger.info(
            "factor_registry_initialized",
            factors=names,
            weights=[evaluator.weight for evaluator in evaluators],
        )

    def __iter__(self) -> Iterator[FactorEvaluator]:
        return iter(self._evaluators)

    def __len__(self) -> int:
        return len(self._evaluators)

    @property
    def names(self) -> list[str]:
        """Factor names in evaluation order."""
        return [evaluator.name for evaluator in self._evaluators]

    @property
    def critical_factors(self) -> frozenset[str]:
        """Factors whose absence forces low confidence."""
        return frozenset(e.name for e in self._evaluators if e.critical)

    @property
    def required_factors(self) -> frozenset[str]:
        """Factors whose absence caps confidence at medium."""
        return frozenset(e.name for e in self._evaluators if not e.optional)

    def evaluate(self, signal: WeatherSignal) -> list[FactorResult]:
        """Evaluate every factor against a signal.

        Args:
            signal: Normalized weather inputs

        Returns:
            Factor results in registry order
        """
        return [evaluator.evaluate(signal) for evaluator in self._evaluators]


def build_default_registry(settings: Settings | None = None) -> FactorRegistry:
    """Build the five-factor registry from settings.

    Args:
        settings: Settings to read thresholds and weights from

    Returns:
        Validated FactorRegistry
    """
    settings = settings or get_settings()
    weights = settings.factor_weights
    neutral = settings.neutral_factor_score

    return FactorRegistry(
        [
            PrecipitationFactor(
                weight=weights[PRECIPITATION],
                threshold=settings.precipitation_max_pct,
                full_score_at=settings.precipitation_full_score_pct,
                zero_score_at=settings.precipitation_zero_score_pct,
                neutral_score=neutral,
            ),
            SkyClarityFactor(
                weight=weights[SKY_CLARITY],
                threshold=settings.sky_clear_min_pct,
                full_score_at=settings.sky_clear_full_score_pct,
                zero_score_at=settings.sky_clear_zero_score_pct,
                neutral_score=neutral,
            ),
            PressureChangeFactor(
                weight=weights[PRESSURE_CHANGE],
                threshold=settings.pressure_change_min,
                full_score_at=settings.pressure_change_full_score,
                zero_score_at=settings.pressure_change_zero_score,
                neutral_score=neutral,
                stable_below=settings.pressure_stable_below,
            ),
            TemperatureDifferentialFactor(
                weight=weights[TEMPERATURE_DIFFERENTIAL],
                threshold=settings.temp_diff_min,
                full_score_at=settings.temp_diff_full_score,
                zero_score_at=settings.temp_diff_zero_score,
                neutral_score=neutral,
            ),
            TransportWindFactor(
                weight=weights[TRANSPORT_WIND],
                threshold=settings.transport_wind_min_index,
                min_speed=settings.transport_wind_min_speed,
                max_speed=settings.transport_wind_max_speed,
                overspeed_penalty=settings.transport_wind_overspeed_penalty,
                mixed_multiplier=settings.transport_wind_mixed_multiplier,
                disorganized_multiplier=settings.transport_wind_disorganized_multiplier,
                neutral_score=neutral,
            ),
        ]
    )
