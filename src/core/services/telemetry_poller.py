import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional

from core.config_loader import config_loader
from core.event_hub import ENVIRONMENT_TOPIC, SOIL_HEALTH_TOPIC, event_hub
from core.models.channel import ChannelId
from core.models.reading_history import ReadingHistory
from core.models.sensor_reading import EnvironmentReading
from core.models.soil_health import ScoredReading
from core.processing.soil_health import score
from core.services.telemetry_client import TelemetryClient, telemetry_client

logger = logging.getLogger(__name__)


class TelemetryPoller:
    """
    Re-reads both telemetry channels on their own intervals.

    Every soil reading is scored as it arrives; the latest results are cached
    here, appended to the reading history and published on the event hub.
    """

    def __init__(self, client: Optional[TelemetryClient] = None):
        self.client = client or telemetry_client
        self.running = False
        self.latest_soil: Optional[ScoredReading] = None
        self.latest_environment: Optional[EnvironmentReading] = None
        self.history = ReadingHistory(config_loader.get_history_config().capacity)
        self._tasks: List[asyncio.Task] = []

    def start(self):
        if self.running:
            return
        self.running = True
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self._poll_loop(
                ChannelId.SOIL, config_loader.get_poll_interval(ChannelId.SOIL), self.refresh_soil)),
            loop.create_task(self._poll_loop(
                ChannelId.ENVIRONMENT, config_loader.get_poll_interval(ChannelId.ENVIRONMENT), self.refresh_environment)),
        ]
        logger.info("TelemetryPoller started")

    async def stop(self):
        """Cancel both poll loops and wait for them to finish."""
        self.running = False
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for result in await asyncio.gather(*tasks, return_exceptions=True):
            if isinstance(result, Exception):
                logger.error(f"Poll loop ended with an error: {result}")
        logger.info("TelemetryPoller stopped")

    def reset(self):
        """Drop cached readings and history."""
        self.latest_soil = None
        self.latest_environment = None
        self.history.clear()

    async def refresh_soil(self) -> ScoredReading:
        """Fetch, score and publish the current soil reading."""
        reading = await self.client.fetch_soil()
        scored = ScoredReading(reading=reading, breakdown=score(reading))
        self.latest_soil = scored
        self.history.append(time.time(), scored)
        event_hub.send_all_on_topic(SOIL_HEALTH_TOPIC, scored)
        logger.debug(
            f"Soil health {scored.breakdown.overall_score} ({scored.breakdown.category.value}) "
            f"from {reading.source.value} reading"
        )
        return scored

    async def refresh_environment(self) -> EnvironmentReading:
        """Fetch and publish the current environment reading."""
        reading = await self.client.fetch_environment()
        self.latest_environment = reading
        event_hub.send_all_on_topic(ENVIRONMENT_TOPIC, reading)
        return reading

    async def get_soil(self, refresh: bool = False) -> ScoredReading:
        """Cached soil result, fetched first if nothing is cached or a refresh is asked for."""
        if refresh or self.latest_soil is None:
            return await self.refresh_soil()
        return self.latest_soil

    async def get_environment(self, refresh: bool = False) -> EnvironmentReading:
        if refresh or self.latest_environment is None:
            return await self.refresh_environment()
        return self.latest_environment

    async def _poll_loop(self, channel: ChannelId, interval: float,
                         refresh: Callable[[], Awaitable[object]]):
        while self.running:
            try:
                await refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error polling {channel.name} telemetry: {e}")
            await asyncio.sleep(interval)


telemetry_poller = TelemetryPoller()
