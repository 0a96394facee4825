from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException

from core.models.recommendation import (
    RecommendationPayloadError,
    RecommendationResult,
    resolve_recommendation,
)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.post("/resolve", response_model=RecommendationResult, responses={
    422: {
        "description": "Payload matches no known recommendation format.",
        "content": {
            "application/json": {
                "example": {"detail": "Unrecognised recommendation payload (keys: ['foo'])"}
            }
        }
    }
})
async def resolve(payload: Dict[str, Any] = Body(...)) -> RecommendationResult:
    """
    Normalize a fertilizer recommendation returned by the recommendation service.

    Accepts both the plain ML prediction and the LLM-enhanced report and
    returns a typed result whose `schema_version` is `ml_only` or `llm_enhanced`.
    """
    try:
        return resolve_recommendation(payload)
    except RecommendationPayloadError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
