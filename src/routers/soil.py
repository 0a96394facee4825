from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from core.config_loader import config_loader
from core.event_hub import SOIL_HEALTH_TOPIC
from core.event_stream import topic_events
from core.locale import VALID_LANGUAGES, Language, locale_context, parse_language
from core.models.channel import SoilParameter
from core.models.sensor_reading import ReadingSource, SensorReading
from core.models.soil_health import ScoreBreakdown, ScoredReading
from core.processing.soil_health import WEIGHTS, score
from core.services.telemetry_client import MAX_RESULTS, telemetry_client
from core.services.telemetry_poller import telemetry_poller
from schemas import (
    ParameterScore,
    ScoreBreakdownOut,
    SensorReadingIn,
    SensorReadingOut,
    SoilHealthResponse,
    SoilHistoryList,
)

router = APIRouter(prefix="/soil", tags=["soil"])

INVALID_LANGUAGE_RESPONSE = {
    "description": "Invalid lang provided.",
    "content": {
        "application/json": {
            "example": {"detail": f"Invalid language: fr. Valid values are: {VALID_LANGUAGES}"}
        }
    }
}


def resolve_language(lang: Optional[str]) -> Language:
    """Explicit `lang` query parameter, else the persisted selection."""
    if lang is None:
        return locale_context.language
    try:
        return parse_language(lang)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def build_breakdown(breakdown: ScoreBreakdown, language: Language) -> ScoreBreakdownOut:
    parameters = [
        ParameterScore(
            parameter=parameter.value,
            label=locale_context.parameter_label(parameter, language),
            score=breakdown.scores.get(parameter),
            weight=WEIGHTS[parameter],
            status=breakdown.statuses[parameter].value,
            status_label=locale_context.status_label(breakdown.statuses[parameter], language),
        )
        for parameter in SoilParameter
    ]
    return ScoreBreakdownOut(
        overall_score=breakdown.overall_score,
        raw_score=breakdown.raw_score,
        category=breakdown.category.value,
        category_label=locale_context.category_label(breakdown.category, language),
        recommendation=locale_context.recommendation(breakdown.category, language),
        language=language.value,
        parameters=parameters,
    )


def build_health_response(scored: ScoredReading, language: Language) -> SoilHealthResponse:
    return SoilHealthResponse(
        reading=SensorReadingOut.model_validate(scored.reading),
        health=build_breakdown(scored.breakdown, language),
    )


@router.get("/latest", response_model=SensorReadingOut)
async def get_latest_reading(refresh: bool = False) -> SensorReadingOut:
    """
    Get the latest soil reading.
    Falls back to a mock reading (source "mock") when the soil channel is unavailable.
    """
    scored = await telemetry_poller.get_soil(refresh=refresh)
    return SensorReadingOut.model_validate(scored.reading)


@router.get("/health", response_model=SoilHealthResponse, responses={400: INVALID_LANGUAGE_RESPONSE})
async def get_soil_health(lang: Optional[str] = None, refresh: bool = False) -> SoilHealthResponse:
    """
    Get the latest soil reading together with its health score.

    The breakdown holds one 0-100 score per parameter, the weighted overall
    score, its category and the recommendation, localized to `lang`
    (en, hi or pa; defaults to the saved language).
    """
    language = resolve_language(lang)
    scored = await telemetry_poller.get_soil(refresh=refresh)
    return build_health_response(scored, language)


@router.post("/score", response_model=ScoreBreakdownOut, responses={
    400: INVALID_LANGUAGE_RESPONSE,
    422: {
        "description": "Missing or non-finite reading values.",
    }
})
async def score_reading(reading: SensorReadingIn, lang: Optional[str] = None) -> ScoreBreakdownOut:
    """
    Score a soil reading supplied by the caller (e.g. a manual soil test).
    Out-of-range values are accepted and saturate their sub-score at 0 or 100.
    """
    language = resolve_language(lang)
    breakdown = score(SensorReading(**reading.model_dump(), source=ReadingSource.MANUAL))
    return build_breakdown(breakdown, language)


@router.get("/history", response_model=SoilHistoryList, responses={
    400: {
        "description": "Invalid results or lang parameter.",
        "content": {
            "application/json": {
                "examples": {
                    "invalid_results": {"value": {"detail": f"Invalid results: 0. Must be between 1 and {MAX_RESULTS}"}},
                    "invalid_lang": {"value": {"detail": f"Invalid language: fr. Valid values are: {VALID_LANGUAGES}"}}
                }
            }
        }
    }
})
async def get_soil_history(results: Optional[int] = None, lang: Optional[str] = None) -> SoilHistoryList:
    """
    Get the most recent soil readings from the telemetry channel, each with its health score.
    Oldest first. `results` defaults to the configured history length.
    """
    language = resolve_language(lang)
    if results is None:
        results = config_loader.get_history_config().results
    try:
        readings = await telemetry_client.fetch_soil_history(results)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    entries = [build_health_response(ScoredReading(reading=r, breakdown=score(r)), language) for r in readings]
    return SoilHistoryList(list=entries)


@router.get("/health/recent", response_model=SoilHistoryList, responses={400: INVALID_LANGUAGE_RESPONSE})
async def get_recent_health(limit: int = 12, lang: Optional[str] = None) -> SoilHistoryList:
    """
    Get the health scores computed by this server since it started, oldest first.
    At most `limit` entries are returned.
    """
    language = resolve_language(lang)
    if limit < 1:
        raise HTTPException(status_code=400, detail=f"Invalid limit: {limit}. Must be at least 1")
    entries = telemetry_poller.history.get_latest(limit)
    return SoilHistoryList(list=[build_health_response(scored, language) for _, scored in entries])


@router.get("/stream", response_class=StreamingResponse, responses={
    200: {"content": {"text/event-stream": {}}},
    400: {
        "description": "Invalid limit or lang parameter.",
        "content": {
            "application/json": {
                "example": {"detail": "Invalid limit: 0. Must be at least 1"}
            }
        }
    }
})
async def stream_soil_health(lang: Optional[str] = None, limit: Optional[int] = None) -> StreamingResponse:
    """
    Stream soil health updates as server-sent events.

    Each `soil_health_update` event carries the same body as GET /soil/health
    and is sent whenever the poller scores a new reading. The current result,
    if there is one, is sent first. Without `limit` the stream stays open.
    """
    language = resolve_language(lang)
    if limit is not None and limit < 1:
        raise HTTPException(status_code=400, detail=f"Invalid limit: {limit}. Must be at least 1")
    events = topic_events(SOIL_HEALTH_TOPIC, lambda scored: build_health_response(scored, language), limit)
    return StreamingResponse(events, media_type="text/event-stream")
