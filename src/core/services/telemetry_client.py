import logging
import math
import random
from typing import Any, Callable, List, Optional, TypeVar

import httpx

from core.channel_health import channel_health
from core.config_loader import config_loader
from core.models.channel import ChannelId
from core.models.sensor_reading import EnvironmentReading, ReadingSource, SensorReading
from core.services import mock_telemetry

logger = logging.getLogger(__name__)

# ThingSpeak caps a single feeds request at 8000 entries
MAX_RESULTS = 8000

T = TypeVar("T")


class TelemetryError(Exception):
    """A telemetry channel could not be read."""


def parse_field(value: Any) -> float:
    """Parse a ThingSpeak field. Missing, unparsable and non-finite values read as 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def validate_results(results: int) -> int:
    if results < 1 or results > MAX_RESULTS:
        raise ValueError(f"Invalid results: {results}. Must be between 1 and {MAX_RESULTS}")
    return results


class TelemetryClient:
    """
    Reads the soil and environment channels from ThingSpeak.

    Every public fetch returns usable readings: when the channel cannot be
    read (network error, bad status, malformed body, empty feed) the failure
    is logged, recorded on the channel's health monitor and a mock reading is
    returned instead. While a channel is backing off, or in emulation mode,
    no request is made at all.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None,
                 emulation: Optional[bool] = None):
        self.emulation_mode = config_loader.get_emulation_mode() if emulation is None else emulation
        self._transport = transport
        self.rng = random.Random()

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=config_loader.get_base_url(),
            timeout=config_loader.get_timeout(),
            transport=self._transport,
        )

    async def fetch_feeds(self, channel: ChannelId, results: int) -> List[dict]:
        """Fetch the newest `results` feed entries of a channel, oldest first."""
        cfg = config_loader.get_channel_config(channel)
        if not cfg.channel_id:
            raise TelemetryError("has no channel id configured")

        params: dict[str, Any] = {"results": results}
        if cfg.api_key:
            params["api_key"] = cfg.api_key

        try:
            async with self._http_client() as client:
                response = await client.get(f"/channels/{cfg.channel_id}/feeds.json", params=params)
        except httpx.HTTPError as e:
            raise TelemetryError(f"request failed: {e}") from e

        if not response.is_success:
            raise TelemetryError(f"returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise TelemetryError(f"returned malformed JSON: {e}") from e

        feeds = payload.get("feeds") if isinstance(payload, dict) else None
        if not isinstance(feeds, list) or not feeds:
            raise TelemetryError("returned no data feeds")
        if not all(isinstance(feed, dict) for feed in feeds):
            raise TelemetryError("returned a malformed feed entry")
        return feeds

    @staticmethod
    def _timestamp(feed: dict) -> Optional[str]:
        created_at = feed.get("created_at")
        return None if created_at is None else str(created_at)

    def _reading_from_feed(self, channel: ChannelId, reading_type: Callable[..., T], feed: dict) -> T:
        fields = config_loader.get_channel_config(channel).fields
        try:
            return reading_type(
                **{attr: parse_field(feed.get(name)) for attr, name in fields.items()},
                timestamp=self._timestamp(feed),
                source=ReadingSource.THINGSPEAK,
            )
        except TypeError as e:
            raise TelemetryError(f"field map does not match the reading: {e}") from e

    def _soil_from_feed(self, feed: dict) -> SensorReading:
        return self._reading_from_feed(ChannelId.SOIL, SensorReading, feed)

    def _environment_from_feed(self, feed: dict) -> EnvironmentReading:
        return self._reading_from_feed(ChannelId.ENVIRONMENT, EnvironmentReading, feed)

    async def _fetch_or_fallback(self, channel: ChannelId, results: int,
                                 parse: Callable[[dict], T],
                                 fallback: Callable[[], List[T]]) -> List[T]:
        if self.emulation_mode:
            return fallback()

        monitor = channel_health.get(channel)
        if not monitor.should_attempt_live():
            return fallback()

        try:
            feeds = await self.fetch_feeds(channel, results)
            readings = [parse(feed) for feed in feeds]
        except TelemetryError as e:
            logger.warning(f"ThingSpeak {channel.name} channel {e}. Using mock data instead.")
            monitor.record_failure(str(e))
            return fallback()

        monitor.record_success()
        logger.debug(f"✓ Fetched {len(readings)} {channel.name} record(s) from ThingSpeak")
        return readings

    async def fetch_soil(self) -> SensorReading:
        """Latest soil reading (mock on failure)."""
        readings = await self._fetch_or_fallback(
            ChannelId.SOIL, 1, self._soil_from_feed,
            lambda: [mock_telemetry.mock_soil_reading()],
        )
        return readings[-1]

    async def fetch_environment(self) -> EnvironmentReading:
        """Latest environment reading (mock on failure)."""
        readings = await self._fetch_or_fallback(
            ChannelId.ENVIRONMENT, 1, self._environment_from_feed,
            lambda: [mock_telemetry.mock_environment_reading()],
        )
        return readings[-1]

    async def fetch_soil_history(self, results: int = 24) -> List[SensorReading]:
        """Newest `results` soil readings, oldest first (mock history on failure)."""
        validate_results(results)
        return await self._fetch_or_fallback(
            ChannelId.SOIL, results, self._soil_from_feed,
            lambda: mock_telemetry.mock_soil_history(results, rng=self.rng),
        )

    async def fetch_environment_history(self, results: int = 24) -> List[EnvironmentReading]:
        """Newest `results` environment readings, oldest first (mock history on failure)."""
        validate_results(results)
        return await self._fetch_or_fallback(
            ChannelId.ENVIRONMENT, results, self._environment_from_feed,
            lambda: mock_telemetry.mock_environment_history(results, rng=self.rng),
        )


# Global instance
telemetry_client = TelemetryClient()
