"""Weighted scoring engine.

Combines factor results into a probability, confidence tier and
recommendation:

1. Weighted sum of factor scores.
2. Unmet factors lose part of their contribution in proportion to how far
   the reading misses the threshold, so one strong factor cannot mask a
   clearly failing one.
3. Non-linear bonus when most or all factors line up, capped at 100.
4. Confidence tier from factors met, the critical factor and probability,
   optionally capped while the model runs in learning mode.
5. Recommendation from tier and probability.
6. Explanation naming the most limiting factor.

The engine never raises for missing inputs; it degrades confidence and
data quality instead.
"""

from datetime import date, datetime, timezone

from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import (
    FACTOR_LABELS,
    MAX_SCORE,
    MIN_SCORE,
    REQUIRED_FACTORS,
    TEMPERATURE_DIFFERENTIAL,
)
from src.shared.models.enums import Confidence, DataQuality, ReasonCode, Recommendation
from src.shared.models.prediction import FactorResult, Prediction

logger = get_logger(__name__)

RECOMMENDATION_TEXT = {
    Recommendation.GO: "Go: strong downslope flow expected at dawn.",
    Recommendation.MAYBE: "Maybe: check conditions again closer to dawn.",
    Recommendation.SKIP: "Skip: conditions unlikely to produce usable flow.",
}


class ScoringEngine:
    """Turns factor results into a Prediction.

    All thresholds, bonuses and caps come from settings.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        critical_factors: frozenset[str] = frozenset({TEMPERATURE_DIFFERENTIAL}),
        required_factors: frozenset[str] = REQUIRED_FACTORS,
    ) -> None:
        """Initialize scoring engine.

        Args:
            settings: Settings with scoring constants (global settings if None)
            critical_factors: Factors that must be present and met for high confidence
            required_factors: Factors whose absence marks data as preliminary
        """
        self.settings = settings or get_settings()
        self.critical_factors = critical_factors
        self.required_factors = required_factors

    def weighted_probability(self, factors: list[FactorResult]) -> float:
        """Weighted sum with the unmet-factor penalty applied (steps 1-2)."""
        total = 0.0
        for factor in factors:
            contribution = factor.score * factor.weight
            total += max(0.0, contribution * (1.0 - factor.shortfall()))
        return total

    def apply_bonus(self, probability: float, factors_met: int, factor_count: int) -> float:
        """Add the multi-factor bonuses (step 3), capped at 100."""
        if factors_met >= self.settings.multi_factor_bonus_min_met:
            probability += self.settings.multi_factor_bonus
            if factors_met == factor_count:
                probability += self.settings.all_factors_bonus
        return max(MIN_SCORE, min(MAX_SCORE, probability))

    def confidence_score(self, factors: list[FactorResult]) -> float:
        """Mean score of factors with data, scaled by data coverage."""
        with_data = [factor for factor in factors if factor.has_data]
        if not factors or not with_data:
            return 0.0
        mean_score = sum(factor.score for factor in with_data) / len(with_data)
        coverage = len(with_data) / len(factors)
        return round(mean_score * coverage, 2)

    def confidence_tier(
        self,
        factors: list[FactorResult],
        probability: int,
    ) -> Confidence:
        """Derive the confidence tier before degradations (step 4)."""
        s = self.settings
        met = sum(1 for factor in factors if factor.meets)
        critical_met = all(
            any(factor.name == name and factor.meets for factor in factors)
            for name in self.critical_factors
        )

        if (
            met >= s.high_confidence_min_factors
            and critical_met
            and probability > s.high_confidence_min_probability
        ):
            return Confidence.HIGH
        if met >= s.medium_confidence_min_factors and probability > s.medium_confidence_min_probability:
            return Confidence.MEDIUM
        return Confidence.LOW

    def recommend(self, confidence: Confidence, probability: int) -> Recommendation:
        """Map tier and probability to a recommendation (step 5)."""
        if confidence is Confidence.HIGH and probability > self.settings.go_probability_threshold:
            return Recommendation.GO
        if (
            confidence.rank >= Confidence.MEDIUM.rank
            and probability > self.settings.maybe_probability_threshold
        ):
            return Recommendation.MAYBE
        return Recommendation.SKIP

    @staticmethod
    def limiting_factor(factors: list[FactorResult]) -> FactorResult | None:
        """Lowest-scoring factor among those that miss their threshold."""
        unmet = [factor for factor in factors if not factor.meets]
        if not unmet:
            return None
        return min(unmet, key=lambda factor: factor.score)

    def summarize(
        self,
        factors: list[FactorResult],
        probability: int,
        recommendation: Recommendation,
        limiting: FactorResult | None,
    ) -> str:
        """Build the one-paragraph summary (step 6)."""
        met = [FACTOR_LABELS.get(f.name, f.name) for f in factors if f.meets]
        head = f"{len(met)}/{len(factors)} factors favorable"
        if met:
            head += f" ({', '.join(met)})"
        head += f"; {probability}% chance of katabatic flow."

        if limiting is None:
            body = "No factor is holding the prediction back."
        else:
            label = FACTOR_LABELS.get(limiting.name, limiting.name)
            body = f"Most limiting: {label}. {limiting.explanation}"

        return f"{head} {body} {RECOMMENDATION_TEXT[recommendation]}"

    def score(
        self,
        factors: list[FactorResult],
        target_date: date,
        generated_at: datetime | None = None,
        extra_reasons: tuple[ReasonCode, ...] = (),
    ) -> Prediction:
        """Score evaluated factors into a Prediction.

        Args:
            factors: Factor results in presentation order
            target_date: Dawn patrol date the prediction is for
            generated_at: Scoring timestamp (UTC now if None)
            extra_reasons: Reason codes supplied by the caller

        Returns:
            New immutable Prediction
        """
        s = self.settings
        reasons: list[ReasonCode] = list(extra_reasons)

        with_data = [factor for factor in factors if factor.has_data]
        missing = {factor.name for factor in factors if not factor.has_data}
        factors_met = sum(1 for factor in factors if factor.meets)

        missing_required = missing & self.required_factors
        missing_critical = missing & self.critical_factors
        if missing:
            reasons.append(ReasonCode.MISSING_SIGNAL)
        if missing_critical:
            reasons.append(ReasonCode.INCOMPLETE_CRITICAL_SIGNAL)
        insufficient = len(with_data) < s.min_valid_factors
        if insufficient:
            reasons.append(ReasonCode.INSUFFICIENT_DATA)

        weighted = self.weighted_probability(factors)
        probability = int(round(self.apply_bonus(weighted, factors_met, len(factors))))

        confidence_score = self.confidence_score(factors)
        confidence = self.confidence_tier(factors, probability)

        if missing_required - missing_critical and confidence is Confidence.HIGH:
            confidence = Confidence.MEDIUM
        if s.learning_mode:
            if confidence_score > s.confidence_cap:
                confidence_score = s.confidence_cap
                reasons.append(ReasonCode.LEARNING_MODE_CAP)
            if confidence is Confidence.HIGH and s.confidence_cap <= s.high_confidence_min_probability:
                confidence = Confidence.MEDIUM
        if missing_critical or insufficient:
            confidence = Confidence.LOW

        recommendation = self.recommend(confidence, probability)
        limiting = self.limiting_factor(factors)
        summary = self.summarize(factors, probability, recommendation, limiting)
        explanation = "\n".join([factor.explanation for factor in factors] + [summary])

        data_quality = (
            DataQuality.PRELIMINARY
            if missing or insufficient or ReasonCode.NO_PRIOR_LOCK in reasons
            else DataQuality.COMPLETE
        )

        prediction = Prediction(
            target_date=target_date,
            probability=probability,
            confidence=confidence,
            confidence_score=confidence_score,
            recommendation=recommendation,
            factors=tuple(factors),
            factors_met=factors_met,
            limiting_factor=limiting.name if limiting else None,
            summary=summary,
            explanation=explanation,
            generated_at=generated_at or datetime.now(timezone.utc),
            data_quality=data_quality,
            reasons=tuple(dict.fromkeys(reasons)),
        )

        logger.info(
            "prediction_scored",
            target_date=target_date.isoformat(),
            weighted=round(weighted, 2),
            probability=probability,
            confidence=confidence.value,
            recommendation=recommendation.value,
            factors_met=factors_met,
            factors_with_data=len(with_data),
            data_quality=data_quality.value,
            limiting_factor=prediction.limiting_factor,
        )

        return prediction
