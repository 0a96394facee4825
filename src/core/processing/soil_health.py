"""
Soil health scoring.

Turns one SensorReading into a ScoreBreakdown: a 0-100 sub-score per soil
parameter, their weighted composite, a qualitative category and the matching
recommendation. Each parameter has an agronomic optimum and its score falls
off linearly with distance from it, clamped to [0, 100].

Pure and total over finite input: no I/O, no shared state, never raises.
Callers sanitise non-finite sensor values before scoring.
"""
import math
from typing import Dict

from core.models.channel import SoilParameter
from core.models.sensor_reading import SensorReading
from core.models.soil_health import (
    RECOMMENDATIONS,
    HealthCategory,
    ParameterStatus,
    ScoreBreakdown,
    SubScores,
)

# Optimal nutrient levels (mg/kg), midpoints of the recommended ranges
IDEAL_NITROGEN = 182.5   # 140-225
IDEAL_PHOSPHORUS = 9.25  # 6-12.5
IDEAL_POTASSIUM = 110.0  # 70-150

IDEAL_PH = 7.0
IDEAL_MOISTURE = 30.0     # %
IDEAL_TEMPERATURE = 25.0  # degrees C

# Points lost per unit of deviation
PH_PENALTY = 20.0
EC_PENALTY = 25.0  # per dS/m, lower EC is better
MOISTURE_PENALTY = 3.0
TEMPERATURE_PENALTY = 4.0

WEIGHTS: Dict[SoilParameter, float] = {
    SoilParameter.NITROGEN: 0.20,
    SoilParameter.PHOSPHORUS: 0.15,
    SoilParameter.POTASSIUM: 0.15,
    SoilParameter.PH: 0.15,
    SoilParameter.EC: 0.10,
    SoilParameter.MOISTURE: 0.15,
    SoilParameter.TEMPERATURE: 0.10,
}

# Inclusive lower bounds, checked best first
CATEGORY_THRESHOLDS = (
    (80.0, HealthCategory.EXCELLENT),
    (60.0, HealthCategory.GOOD),
    (40.0, HealthCategory.POOR),
)
STATUS_THRESHOLDS = (
    (80.0, ParameterStatus.OPTIMAL),
    (60.0, ParameterStatus.GOOD),
    (40.0, ParameterStatus.NEEDS_ATTENTION),
)


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, value))


def _relative_deviation_score(value: float, ideal: float) -> float:
    # Reaches zero once the value is a full `ideal` away from the optimum
    return clamp_score(100.0 - abs(value - ideal) / ideal * 100.0)


def _linear_penalty_score(value: float, target: float, penalty: float) -> float:
    return clamp_score(100.0 - abs(value - target) * penalty)


def nitrogen_score(nitrogen: float) -> float:
    return _relative_deviation_score(nitrogen, IDEAL_NITROGEN)


def phosphorus_score(phosphorus: float) -> float:
    return _relative_deviation_score(phosphorus, IDEAL_PHOSPHORUS)


def potassium_score(potassium: float) -> float:
    return _relative_deviation_score(potassium, IDEAL_POTASSIUM)


def ph_score(ph: float) -> float:
    return _linear_penalty_score(ph, IDEAL_PH, PH_PENALTY)


def ec_score(ec: float) -> float:
    """One-sided: 100 at 0 dS/m, losing 25 points per dS/m."""
    return clamp_score(100.0 - ec * EC_PENALTY)


def moisture_score(moisture: float) -> float:
    return _linear_penalty_score(moisture, IDEAL_MOISTURE, MOISTURE_PENALTY)


def temperature_score(temperature: float) -> float:
    return _linear_penalty_score(temperature, IDEAL_TEMPERATURE, TEMPERATURE_PENALTY)


def sub_scores(reading: SensorReading) -> SubScores:
    return SubScores(
        nitrogen=nitrogen_score(reading.nitrogen),
        phosphorus=phosphorus_score(reading.phosphorus),
        potassium=potassium_score(reading.potassium),
        ph=ph_score(reading.ph),
        ec=ec_score(reading.electrical_conductivity),
        moisture=moisture_score(reading.soil_moisture),
        temperature=temperature_score(reading.soil_temperature),
    )


def composite_score(scores: SubScores) -> float:
    """Weighted sum of the sub-scores. Weights sum to 1, so the result stays in [0, 100]."""
    return sum(weight * scores.get(parameter) for parameter, weight in WEIGHTS.items())


def categorize(score: float) -> HealthCategory:
    for threshold, category in CATEGORY_THRESHOLDS:
        if score >= threshold:
            return category
    return HealthCategory.VERY_POOR


def parameter_status(score: float) -> ParameterStatus:
    for threshold, status in STATUS_THRESHOLDS:
        if score >= threshold:
            return status
    return ParameterStatus.CRITICAL


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score(reading: SensorReading) -> ScoreBreakdown:
    """Score one reading. Identical input always yields identical output."""
    scores = sub_scores(reading)
    raw = composite_score(scores)
    category = categorize(raw)
    return ScoreBreakdown(
        scores=scores,
        raw_score=raw,
        overall_score=round_half_up(raw),
        category=category,
        recommendation=RECOMMENDATIONS[category],
        statuses={p: parameter_status(scores.get(p)) for p in SoilParameter},
    )
