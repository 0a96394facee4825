import math
from dataclasses import dataclass
from typing import Dict, Iterable

from core.models.farm import AreaUnit, Farm

HECTARES_PER_UNIT: Dict[AreaUnit, float] = {
    AreaUnit.HECTARES: 1.0,
    AreaUnit.ACRES: 0.404686,
    AreaUnit.BIGHA: 0.1338,  # approximate, varies by state
}


@dataclass(frozen=True)
class FarmStats:
    total_farms: int
    total_size_hectares: float


def to_hectares(size: float, unit: AreaUnit) -> float:
    return size * HECTARES_PER_UNIT[unit]


def compute_farm_stats(farms: Iterable[Farm]) -> FarmStats:
    """Count farms and total their area in hectares, rounded half-up to 2 decimals."""
    count = 0
    total = 0.0
    for farm in farms:
        count += 1
        total += to_hectares(farm.size, farm.unit)
    return FarmStats(total_farms=count, total_size_hectares=math.floor(total * 100 + 0.5) / 100)
