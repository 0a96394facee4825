from typing import List

from fastapi import APIRouter

from core.models.farm import Farm
from core.processing.farm_stats import compute_farm_stats
from schemas import FarmStatsResponse

router = APIRouter(prefix="/farms", tags=["farms"])


@router.post("/stats", response_model=FarmStatsResponse)
async def get_farm_stats(farms: List[Farm]) -> FarmStatsResponse:
    """
    Summarize a user's farms: how many there are and their total area in hectares.
    Acres and bigha are converted before summing.
    """
    stats = compute_farm_stats(farms)
    return FarmStatsResponse(total_farms=stats.total_farms, total_size_hectares=stats.total_size_hectares)
