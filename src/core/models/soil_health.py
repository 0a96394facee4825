"""
Soil health result models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

from core.models.channel import SoilParameter
from core.models.sensor_reading import SensorReading


class HealthCategory(Enum):
    """Qualitative soil health tiers, best first."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    POOR = "Poor"
    VERY_POOR = "Very Poor"


class ParameterStatus(Enum):
    """Per-parameter status derived from a sub-score."""
    OPTIMAL = "Optimal"
    GOOD = "Good"
    NEEDS_ATTENTION = "Needs Attention"
    CRITICAL = "Critical"


RECOMMENDATIONS: Dict[HealthCategory, str] = {
    HealthCategory.EXCELLENT: "Maintain current soil management practices",
    HealthCategory.GOOD: "Apply balanced fertilizer to optimize nutrient levels",
    HealthCategory.POOR: "Add organic matter and adjust nutrient levels urgently",
    HealthCategory.VERY_POOR: "Rebuild soil health urgently - consult agronomist",
}


@dataclass(frozen=True)
class SubScores:
    """Normalized 0-100 score for each soil parameter."""
    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    ec: float
    moisture: float
    temperature: float

    def get(self, parameter: SoilParameter) -> float:
        return getattr(self, parameter.value)

    def as_dict(self) -> Dict[str, float]:
        return {p.value: self.get(p) for p in SoilParameter}


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Result of scoring one SensorReading.

    `raw_score` is the weighted sum before rounding and is what the
    category is derived from; `overall_score` is the rounded display value.
    """
    scores: SubScores
    raw_score: float
    overall_score: int
    category: HealthCategory
    recommendation: str
    statuses: Dict[SoilParameter, ParameterStatus] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredReading:
    reading: SensorReading
    breakdown: ScoreBreakdown
