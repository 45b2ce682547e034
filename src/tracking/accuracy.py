"""Accuracy math for verified predictions.

An accuracy score blends two parts:

- outcome: did the go/maybe vs skip call match whether usable downslope
  flow actually showed up
- speed closeness: how near the observed average speed came to the speed
  implied by the recommendation, as a two-sided normal tail probability
"""

from collections.abc import Iterable

import scipy.stats as stats

from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings
from src.shared.models.enums import Confidence, Recommendation
from src.shared.models.verification import AccuracySummary, TierCalibration, VerificationRecord
from src.shared.models.weather import ObservedSignal

logger = get_logger(__name__)


def in_downslope_sector(direction: float, start: float, end: float) -> bool:
    """Check if a wind direction falls in a sector measured clockwise.

    Args:
        direction: Wind direction in degrees
        start: Sector start in degrees
        end: Sector end in degrees (may wrap through north)

    Returns:
        True if the direction lies within the sector, edges included
    """
    direction %= 360
    start %= 360
    end %= 360
    if start <= end:
        return start <= direction <= end
    return direction >= start or direction <= end


def observed_conditions_met(observed: ObservedSignal, settings: Settings) -> bool:
    """Decide whether a dawn session had usable downslope flow.

    Speed must reach the success threshold. Direction is checked only when
    the observation reports one.
    """
    if observed.average_speed < settings.success_wind_speed:
        return False
    if observed.direction is None:
        return True
    return in_downslope_sector(
        observed.direction,
        settings.downslope_direction_start,
        settings.downslope_direction_end,
    )


def expected_speed(recommendation: Recommendation, settings: Settings) -> float:
    """Average wind speed a recommendation implies."""
    return {
        Recommendation.GO: settings.expected_speed_go,
        Recommendation.MAYBE: settings.expected_speed_maybe,
        Recommendation.SKIP: settings.expected_speed_skip,
    }[recommendation]


def speed_closeness(observed: float, expected: float, tolerance: float) -> float:
    """Two-sided tail probability of the speed miss, from 1.0 (exact) toward 0.0.

    Args:
        observed: Observed average speed
        expected: Speed implied by the recommendation
        tolerance: Miss that counts as one standard deviation

    Returns:
        Closeness in [0, 1]
    """
    if tolerance <= 0:
        # Degenerate case: exact match only
        return 1.0 if observed == expected else 0.0
    z_score = abs(observed - expected) / tolerance
    return float(2.0 * (1.0 - stats.norm.cdf(z_score)))


def accuracy_score(
    predicted_favorable: bool,
    conditions_met: bool,
    observed_speed: float,
    expected: float,
    settings: Settings,
) -> float:
    """Score a verified prediction from 0 to 100.

    Example:
        >>> accuracy_score(True, True, 18.0, 18.0, settings)
        100.0
    """
    outcome = 1.0 if predicted_favorable == conditions_met else 0.0
    closeness = speed_closeness(observed_speed, expected, settings.speed_tolerance)
    weight = settings.outcome_weight
    score = 100.0 * (weight * outcome + (1.0 - weight) * closeness)

    logger.debug(
        "accuracy_score_calculated",
        outcome=outcome,
        closeness=round(closeness, 4),
        observed_speed=observed_speed,
        expected_speed=expected,
        score=round(score, 1),
    )
    return round(max(0.0, min(100.0, score)), 1)


def summarize(records: Iterable[VerificationRecord]) -> AccuracySummary:
    """Aggregate verification records into an accuracy summary.

    False positives are go/maybe calls on mornings without usable flow;
    false negatives are skip calls on mornings that had it.
    """
    records = list(records)
    if not records:
        return AccuracySummary()

    correct = sum(1 for record in records if record.outcome_correct)
    false_positives = sum(
        1 for record in records if record.predicted_favorable and not record.observed_conditions_met
    )
    false_negatives = sum(
        1 for record in records if not record.predicted_favorable and record.observed_conditions_met
    )

    calibration = []
    for tier in Confidence:
        tier_records = [record for record in records if record.predicted_confidence is tier]
        if not tier_records:
            continue
        successes = sum(1 for record in tier_records if record.observed_conditions_met)
        calibration.append(
            TierCalibration(
                confidence=tier,
                count=len(tier_records),
                observed_success_pct=round(100.0 * successes / len(tier_records), 1),
                mean_predicted_probability=round(
                    sum(record.predicted_probability for record in tier_records) / len(tier_records),
                    1,
                ),
            )
        )

    return AccuracySummary(
        total=len(records),
        correct=correct,
        false_positives=false_positives,
        false_negatives=false_negatives,
        accuracy_pct=round(100.0 * correct / len(records), 1),
        mean_accuracy_score=round(
            sum(record.accuracy_score for record in records) / len(records), 1
        ),
        calibration=calibration,
    )
