"""Unit tests for domain models."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from src.shared.models import (
    Confidence,
    DataQuality,
    FactorResult,
    FlowOrganization,
    LifecycleRecord,
    LifecycleState,
    ObservedSignal,
    Prediction,
    Recommendation,
    StateTransition,
    ThresholdDirection,
    TransportWind,
    VerificationRecord,
    WeatherSignal,
)


def make_factor(**overrides) -> FactorResult:
    data = {
        "name": "temperature_differential",
        "raw_value": 13.0,
        "threshold": 9.0,
        "direction": ThresholdDirection.AT_LEAST,
        "meets": True,
        "score": 100.0,
        "weight": 0.30,
        "penalty_span": 3.0,
    }
    data.update(overrides)
    return FactorResult(**data)


def make_prediction(**overrides) -> Prediction:
    data = {
        "target_date": date(2026, 10, 20),
        "probability": 82,
        "confidence": Confidence.HIGH,
        "confidence_score": 80.0,
        "recommendation": Recommendation.GO,
        "factors": (make_factor(),),
        "factors_met": 1,
        "summary": "summary",
        "explanation": "explanation",
        "generated_at": datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc),
        "data_quality": DataQuality.COMPLETE,
    }
    data.update(overrides)
    return Prediction(**data)


class TestFactorResult:
    """Test suite for FactorResult model."""

    def test_meets_must_match_threshold(self) -> None:
        """Test that a meets flag disagreeing with the raw value is rejected."""
        with pytest.raises(ValidationError):
            make_factor(raw_value=7.0, meets=True)

    def test_at_most_direction(self) -> None:
        """Test that at-most factors meet at or below threshold."""
        factor = make_factor(
            name="precipitation",
            raw_value=20.0,
            threshold=20.0,
            direction=ThresholdDirection.AT_MOST,
            meets=True,
        )

        assert factor.satisfies(20.0) is True
        assert factor.satisfies(20.5) is False

    def test_missing_data_never_meets(self) -> None:
        """Test that a factor without data cannot claim to meet."""
        with pytest.raises(ValidationError):
            make_factor(raw_value=None, meets=True)

        factor = make_factor(raw_value=None, meets=False, score=50.0)
        assert factor.has_data is False

    def test_score_bounds(self) -> None:
        """Test that scores outside 0-100 are rejected."""
        with pytest.raises(ValidationError):
            make_factor(score=101.0)
        with pytest.raises(ValidationError):
            make_factor(score=-1.0)

    def test_shortfall(self) -> None:
        """Test shortfall fraction for unmet factors."""
        assert make_factor().shortfall() == 0.0
        assert make_factor(raw_value=7.5, meets=False, score=25.0).shortfall() == pytest.approx(0.5)
        assert make_factor(raw_value=1.0, meets=False, score=0.0).shortfall() == 1.0
        assert make_factor(raw_value=None, meets=False, score=50.0).shortfall() == 0.0

    def test_frozen(self) -> None:
        """Test that factor results cannot be mutated."""
        factor = make_factor()
        with pytest.raises(ValidationError):
            factor.score = 10.0


class TestWeatherSignal:
    """Test suite for WeatherSignal model."""

    def test_precipitation_uses_worse_window(self) -> None:
        """Test that the higher of the two precipitation chances is used."""
        signal = WeatherSignal(precipitation_analysis_pct=8.0, precipitation_target_pct=15.0)

        assert signal.precipitation_pct == 15.0

    def test_precipitation_single_window(self) -> None:
        """Test that a single available window is used as is."""
        assert WeatherSignal(precipitation_target_pct=4.0).precipitation_pct == 4.0
        assert WeatherSignal().precipitation_pct is None

    def test_is_empty(self) -> None:
        """Test empty signal detection."""
        assert WeatherSignal().is_empty is True
        assert WeatherSignal(temperature_differential=10.0).is_empty is False

    def test_transport_wind_defaults_to_mixed(self) -> None:
        """Test that transport wind organization defaults to mixed."""
        assert TransportWind(speed=10.0).organization is FlowOrganization.MIXED

    def test_rejects_out_of_range_percent(self) -> None:
        """Test that percentages above 100 are rejected."""
        with pytest.raises(ValidationError):
            WeatherSignal(sky_clear_pct=120.0)

    def test_observed_signal_requires_non_negative_speed(self) -> None:
        """Test observed speed validation."""
        with pytest.raises(ValidationError):
            ObservedSignal(average_speed=-1.0)


class TestPrediction:
    """Test suite for Prediction model."""

    def test_defaults_to_unlocked_preview(self) -> None:
        """Test that a fresh prediction is an unlocked preview."""
        prediction = make_prediction()

        assert prediction.lifecycle_state is LifecycleState.PREVIEW
        assert prediction.lock_type is None
        assert prediction.is_locked is False

    def test_predicts_favorable(self) -> None:
        """Test that go and maybe count as favorable calls."""
        assert make_prediction().predicts_favorable is True
        assert make_prediction(recommendation=Recommendation.MAYBE).predicts_favorable is True
        assert make_prediction(recommendation=Recommendation.SKIP).predicts_favorable is False

    def test_factor_lookup(self) -> None:
        """Test looking up a factor by name."""
        prediction = make_prediction()

        assert prediction.factor("temperature_differential") is not None
        assert prediction.factor("precipitation") is None

    def test_json_round_trip_is_equal(self) -> None:
        """Test that a stored prediction loads back equal."""
        prediction = make_prediction()

        loaded = Prediction.model_validate(prediction.model_dump(mode="json"))

        assert loaded == prediction


class TestEnums:
    """Test suite for ordering helpers on enums."""

    def test_confidence_rank(self) -> None:
        """Test confidence tiers order low < medium < high."""
        assert Confidence.LOW.rank < Confidence.MEDIUM.rank < Confidence.HIGH.rank

    def test_lifecycle_order(self) -> None:
        """Test lifecycle state order and frozen states."""
        assert LifecycleState.PREVIEW.order == 0
        assert LifecycleState.VERIFIED.order == 4
        assert LifecycleState.LOCKED_EVENING.is_frozen is False
        assert LifecycleState.LOCKED_FINAL.is_frozen is True
        assert LifecycleState.ACTIVE.is_frozen is True

    def test_lifecycle_wire_values(self) -> None:
        """Test lifecycle state serialized names."""
        assert LifecycleState.LOCKED_EVENING.value == "locked-evening"
        assert LifecycleState.LOCKED_FINAL.value == "locked-final"


class TestLifecycleRecord:
    """Test suite for LifecycleRecord model."""

    def test_record_key(self) -> None:
        """Test persistence key format."""
        record = LifecycleRecord(target_date=date(2026, 10, 20))

        assert record.record_key == "lifecycle:2026-10-20"
        assert record.is_persisted is False
        assert record.state is LifecycleState.PREVIEW

    def test_visited_states(self) -> None:
        """Test visited states follow history order."""
        at = datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)
        record = LifecycleRecord(
            target_date=date(2026, 10, 20),
            state=LifecycleState.LOCKED_EVENING,
            history=(
                StateTransition(state=LifecycleState.PREVIEW, at=at),
                StateTransition(state=LifecycleState.LOCKED_EVENING, at=at),
            ),
        )

        assert record.visited_states == [LifecycleState.PREVIEW, LifecycleState.LOCKED_EVENING]


class TestVerificationRecord:
    """Test suite for VerificationRecord model."""

    def make_record(self, recommendation: Recommendation, met: bool) -> VerificationRecord:
        return VerificationRecord(
            target_date=date(2026, 10, 20),
            predicted_probability=80,
            predicted_recommendation=recommendation,
            predicted_confidence=Confidence.HIGH,
            observed_average_speed=16.0,
            observed_conditions_met=met,
            expected_speed=18.0,
            accuracy_score=90.0,
            verified_at=datetime(2026, 10, 20, 14, 0, tzinfo=timezone.utc),
        )

    def test_record_key(self) -> None:
        """Test persistence key format."""
        record = self.make_record(Recommendation.GO, True)

        assert record.record_key == "verification:2026-10-20"

    def test_outcome_correct(self) -> None:
        """Test outcome matching for favorable and skip calls."""
        assert self.make_record(Recommendation.GO, True).outcome_correct is True
        assert self.make_record(Recommendation.MAYBE, False).outcome_correct is False
        assert self.make_record(Recommendation.SKIP, False).outcome_correct is True
        assert self.make_record(Recommendation.SKIP, True).outcome_correct is False
