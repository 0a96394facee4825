from fastapi import APIRouter

from core.channel_health import channel_health
from core.services.telemetry_client import telemetry_client
from schemas import ChannelStatus, TelemetryStatusResponse

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.get("/status", response_model=TelemetryStatusResponse)
async def get_telemetry_status() -> TelemetryStatusResponse:
    """
    Get the state of each telemetry channel.

    - **live**: the last fetch succeeded.
    - **fallback**: the channel failed and mock data is served until `next_retry_in` elapses.
    """
    return TelemetryStatusResponse(
        emulation=telemetry_client.emulation_mode,
        channels=[ChannelStatus(**snapshot) for snapshot in channel_health.snapshot()],
    )
