"""
Tests for soil health scoring: sub-scores, weighted composite, categories.
"""
import math
from dataclasses import replace

import pytest

from core.models.channel import SoilParameter
from core.models.sensor_reading import ReadingSource, SensorReading
from core.models.soil_health import HealthCategory, ParameterStatus
from core.processing.soil_health import (
    IDEAL_NITROGEN,
    IDEAL_PH,
    IDEAL_PHOSPHORUS,
    IDEAL_POTASSIUM,
    WEIGHTS,
    categorize,
    composite_score,
    ec_score,
    moisture_score,
    nitrogen_score,
    parameter_status,
    ph_score,
    round_half_up,
    score,
    sub_scores,
    temperature_score,
)
from core.services.mock_telemetry import mock_soil_reading

OPTIMAL = SensorReading(
    nitrogen=182.5,
    phosphorus=9.25,
    potassium=110.0,
    ph=7.0,
    electrical_conductivity=0.0,
    soil_moisture=30.0,
    soil_temperature=25.0,
)

MOCK = SensorReading(
    nitrogen=45.2,
    phosphorus=23.8,
    potassium=156.4,
    ph=6.5,
    electrical_conductivity=0.8,
    soil_moisture=68.5,
    soil_temperature=24.3,
)


class TestSubScores:
    """Each parameter's 0-100 score."""

    def test_optimum_scores_100(self) -> None:
        scores = sub_scores(OPTIMAL)
        for parameter in SoilParameter:
            assert scores.get(parameter) == 100.0, parameter

    def test_nutrient_score_reaches_zero_one_ideal_away(self) -> None:
        assert nitrogen_score(0.0) == 0.0
        assert nitrogen_score(2 * IDEAL_NITROGEN) == 0.0
        assert nitrogen_score(IDEAL_NITROGEN / 2) == pytest.approx(50.0)

    def test_ph_penalty_is_20_points_per_unit(self) -> None:
        assert ph_score(6.5) == pytest.approx(90.0)
        assert ph_score(8.0) == pytest.approx(80.0)
        assert ph_score(IDEAL_PH + 5) == 0.0

    def test_ph_far_out_of_range_clamps_to_zero(self) -> None:
        assert ph_score(20.0) == 0.0
        assert ph_score(-3.0) == 0.0

    def test_ec_is_one_sided(self) -> None:
        assert ec_score(0.0) == 100.0
        assert ec_score(2.0) == pytest.approx(50.0)
        assert ec_score(4.0) == 0.0
        # Negative conductivity is a sensor glitch, but it never exceeds 100
        assert ec_score(-1.0) == 100.0

    def test_moisture_and_temperature_penalties(self) -> None:
        assert moisture_score(40.0) == pytest.approx(70.0)
        assert moisture_score(68.5) == 0.0
        assert temperature_score(24.3) == pytest.approx(97.2)
        assert temperature_score(50.0) == 0.0

    @pytest.mark.parametrize("value", [-1e9, -500.0, -1.0, 0.0, 1e-9, 3.3, 75.0, 1000.0, 1e9])
    def test_all_sub_scores_are_bounded(self, value: float) -> None:
        reading = SensorReading(value, value, value, value, value, value, value)
        scores = sub_scores(reading)
        for parameter in SoilParameter:
            assert 0.0 <= scores.get(parameter) <= 100.0

    def test_scores_never_increase_moving_away_from_optimum(self) -> None:
        cases = [
            (nitrogen_score, IDEAL_NITROGEN),
            (lambda v: sub_scores(replace(OPTIMAL, phosphorus=v)).phosphorus, IDEAL_PHOSPHORUS),
            (lambda v: sub_scores(replace(OPTIMAL, potassium=v)).potassium, IDEAL_POTASSIUM),
            (ph_score, IDEAL_PH),
            (moisture_score, 30.0),
            (temperature_score, 25.0),
        ]
        for fn, ideal in cases:
            for direction in (1, -1):
                previous = fn(ideal)
                for step in range(1, 60):
                    current = fn(ideal + direction * step * ideal / 20)
                    assert current <= previous
                    previous = current

        previous = ec_score(0.0)
        for step in range(1, 60):
            current = ec_score(step * 0.1)
            assert current <= previous
            previous = current


class TestComposite:
    """Weighted overall score."""

    def test_weights_sum_to_one(self) -> None:
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)
        assert set(WEIGHTS) == set(SoilParameter)

    def test_optimal_reading_scores_100_excellent(self) -> None:
        breakdown = score(OPTIMAL)
        assert breakdown.raw_score == pytest.approx(100.0)
        assert breakdown.overall_score == 100
        assert breakdown.category == HealthCategory.EXCELLENT
        assert breakdown.recommendation == "Maintain current soil management practices"

    def test_raw_score_is_weighted_sum(self) -> None:
        breakdown = score(MOCK)
        expected = sum(WEIGHTS[p] * breakdown.scores.get(p) for p in SoilParameter)
        assert breakdown.raw_score == pytest.approx(expected)
        assert composite_score(breakdown.scores) == pytest.approx(expected)

    def test_worst_reading_scores_zero_very_poor(self) -> None:
        worst = SensorReading(0.0, 0.0, 0.0, 20.0, 10.0, 100.0, 80.0)
        breakdown = score(worst)
        assert breakdown.raw_score == 0.0
        assert breakdown.overall_score == 0
        assert breakdown.category == HealthCategory.VERY_POOR
        assert breakdown.recommendation == "Rebuild soil health urgently - consult agronomist"

    def test_overall_score_is_rounded_raw(self) -> None:
        breakdown = score(MOCK)
        assert breakdown.overall_score == round_half_up(breakdown.raw_score)
        assert abs(breakdown.overall_score - breakdown.raw_score) <= 0.5


class TestMockReadingRegression:
    """The fixed mock reading served when telemetry is unavailable."""

    def test_sub_scores(self) -> None:
        scores = sub_scores(MOCK)
        assert scores.nitrogen == pytest.approx(24.767123, abs=1e-6)
        assert scores.phosphorus == 0.0
        assert scores.potassium == pytest.approx(57.818182, abs=1e-6)
        assert scores.ph == pytest.approx(90.0)
        assert scores.ec == pytest.approx(80.0)
        assert scores.moisture == 0.0
        assert scores.temperature == pytest.approx(97.2)

    def test_overall(self) -> None:
        breakdown = score(MOCK)
        assert breakdown.raw_score == pytest.approx(44.846152, abs=1e-6)
        assert breakdown.overall_score == 45
        assert breakdown.category == HealthCategory.POOR
        assert breakdown.recommendation == "Add organic matter and adjust nutrient levels urgently"

    def test_statuses(self) -> None:
        statuses = score(MOCK).statuses
        assert statuses[SoilParameter.NITROGEN] == ParameterStatus.CRITICAL
        assert statuses[SoilParameter.PHOSPHORUS] == ParameterStatus.CRITICAL
        assert statuses[SoilParameter.POTASSIUM] == ParameterStatus.NEEDS_ATTENTION
        assert statuses[SoilParameter.PH] == ParameterStatus.OPTIMAL
        assert statuses[SoilParameter.MOISTURE] == ParameterStatus.CRITICAL
        assert statuses[SoilParameter.TEMPERATURE] == ParameterStatus.OPTIMAL

    def test_generated_mock_reading_matches(self) -> None:
        reading = mock_soil_reading()
        assert reading.source == ReadingSource.MOCK
        assert score(reading).overall_score == 45


class TestCategories:
    """Category thresholds apply to the unrounded score."""

    @pytest.mark.parametrize("value, expected", [
        (100.0, HealthCategory.EXCELLENT),
        (80.0, HealthCategory.EXCELLENT),
        (79.999, HealthCategory.GOOD),
        (79.6, HealthCategory.GOOD),
        (60.0, HealthCategory.GOOD),
        (59.999, HealthCategory.POOR),
        (40.0, HealthCategory.POOR),
        (39.999, HealthCategory.VERY_POOR),
        (0.0, HealthCategory.VERY_POOR),
    ])
    def test_categorize(self, value: float, expected: HealthCategory) -> None:
        assert categorize(value) == expected

    def test_display_rounding_does_not_promote_category(self) -> None:
        # 79.6 is displayed as 80 but stays Good
        assert round_half_up(79.6) == 80
        assert categorize(79.6) == HealthCategory.GOOD

    @pytest.mark.parametrize("value, expected", [
        (80.0, ParameterStatus.OPTIMAL),
        (79.9, ParameterStatus.GOOD),
        (60.0, ParameterStatus.GOOD),
        (59.9, ParameterStatus.NEEDS_ATTENTION),
        (40.0, ParameterStatus.NEEDS_ATTENTION),
        (39.9, ParameterStatus.CRITICAL),
    ])
    def test_parameter_status(self, value: float, expected: ParameterStatus) -> None:
        assert parameter_status(value) == expected

    def test_round_half_up(self) -> None:
        assert round_half_up(0.5) == 1
        assert round_half_up(44.5) == 45
        assert round_half_up(44.4999) == 44
        assert round_half_up(2.5) == 3


class TestPurity:
    """Scoring is deterministic and leaves its input alone."""

    def test_same_input_same_output(self) -> None:
        assert score(MOCK) == score(MOCK)

    def test_reading_is_not_modified(self) -> None:
        before = replace(MOCK)
        score(MOCK)
        assert MOCK == before

    def test_result_is_finite(self) -> None:
        extreme = SensorReading(1e308, -1e308, 1e308, -1e308, 1e308, -1e308, 1e308)
        breakdown = score(extreme)
        assert math.isfinite(breakdown.raw_score)
        assert 0 <= breakdown.overall_score <= 100
