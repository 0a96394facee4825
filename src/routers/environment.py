from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from core.config_loader import config_loader
from core.event_hub import ENVIRONMENT_TOPIC
from core.event_stream import topic_events
from core.services.telemetry_client import MAX_RESULTS, telemetry_client
from core.services.telemetry_poller import telemetry_poller
from schemas import EnvironmentHistoryList, EnvironmentReadingOut

router = APIRouter(prefix="/environment", tags=["environment"])


@router.get("/latest", response_model=EnvironmentReadingOut)
async def get_latest_environment(refresh: bool = False) -> EnvironmentReadingOut:
    """
    Get the latest ambient reading (sunlight, air temperature, humidity).
    Falls back to a mock reading when the environment channel is unavailable.
    """
    reading = await telemetry_poller.get_environment(refresh=refresh)
    return EnvironmentReadingOut.model_validate(reading)


@router.get("/history", response_model=EnvironmentHistoryList, responses={
    400: {
        "description": "Invalid results parameter.",
        "content": {
            "application/json": {
                "example": {"detail": f"Invalid results: 0. Must be between 1 and {MAX_RESULTS}"}
            }
        }
    }
})
async def get_environment_history(results: Optional[int] = None) -> EnvironmentHistoryList:
    """Get the most recent ambient readings, oldest first."""
    if results is None:
        results = config_loader.get_history_config().results
    try:
        readings = await telemetry_client.fetch_environment_history(results)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return EnvironmentHistoryList(list=[EnvironmentReadingOut.model_validate(r) for r in readings])


@router.get("/stream", response_class=StreamingResponse, responses={
    200: {"content": {"text/event-stream": {}}},
    400: {
        "description": "Invalid limit parameter.",
        "content": {
            "application/json": {
                "example": {"detail": "Invalid limit: 0. Must be at least 1"}
            }
        }
    }
})
async def stream_environment(limit: Optional[int] = None) -> StreamingResponse:
    """Stream ambient readings as `environment_update` server-sent events, current reading first."""
    if limit is not None and limit < 1:
        raise HTTPException(status_code=400, detail=f"Invalid limit: {limit}. Must be at least 1")
    events = topic_events(ENVIRONMENT_TOPIC, EnvironmentReadingOut.model_validate, limit)
    return StreamingResponse(events, media_type="text/event-stream")
