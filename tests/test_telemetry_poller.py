"""
Tests for the background poller: scoring, caching and publishing.
"""
import asyncio
import contextlib

import pytest

from core.event_hub import ENVIRONMENT_TOPIC, SOIL_HEALTH_TOPIC, event_hub
from core.models.channel import ChannelId
from core.models.sensor_reading import ReadingSource
from core.models.soil_health import HealthCategory
from core.services.mock_telemetry import mock_environment_reading, mock_soil_reading
from core.services.telemetry_client import TelemetryClient
from core.services.telemetry_poller import TelemetryPoller


class FlakyClient:
    """Fails the first soil fetch, then serves the mock reading."""

    def __init__(self):
        self.soil_calls = 0

    async def fetch_soil(self):
        self.soil_calls += 1
        if self.soil_calls == 1:
            raise RuntimeError("boom")
        return mock_soil_reading()

    async def fetch_environment(self):
        return mock_environment_reading()


@pytest.fixture
def poller():
    return TelemetryPoller(client=TelemetryClient(emulation=True))


@pytest.fixture
def received():
    messages = []

    def handler(topic, message):
        messages.append((topic, message))

    event_hub.subscribe(SOIL_HEALTH_TOPIC, handler)
    event_hub.subscribe(ENVIRONMENT_TOPIC, handler)
    yield messages
    event_hub.unsubscribe(SOIL_HEALTH_TOPIC, handler)
    event_hub.unsubscribe(ENVIRONMENT_TOPIC, handler)


class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_soil_scores_caches_and_publishes(self, poller, received) -> None:
        scored = await poller.refresh_soil()

        assert scored.reading.source == ReadingSource.MOCK
        assert scored.breakdown.overall_score == 45
        assert scored.breakdown.category == HealthCategory.POOR
        assert poller.latest_soil is scored
        assert poller.history.size() == 1
        assert poller.history.latest()[1] is scored
        assert (SOIL_HEALTH_TOPIC, scored) in received
        assert event_hub.last_message(SOIL_HEALTH_TOPIC) is scored

    @pytest.mark.asyncio
    async def test_refresh_environment_publishes(self, poller, received) -> None:
        reading = await poller.refresh_environment()

        assert poller.latest_environment is reading
        assert (ENVIRONMENT_TOPIC, reading) in received

    @pytest.mark.asyncio
    async def test_get_soil_uses_cache_unless_refresh(self, poller) -> None:
        first = await poller.get_soil()
        cached = await poller.get_soil()
        refreshed = await poller.get_soil(refresh=True)

        assert cached is first
        assert refreshed is not first
        assert poller.history.size() == 2

    @pytest.mark.asyncio
    async def test_get_environment_fetches_when_empty(self, poller) -> None:
        assert poller.latest_environment is None
        reading = await poller.get_environment()
        assert reading.source == ReadingSource.MOCK
        assert await poller.get_environment() is reading

    @pytest.mark.asyncio
    async def test_reset(self, poller) -> None:
        await poller.refresh_soil()
        poller.reset()
        assert poller.latest_soil is None
        assert poller.history.size() == 0


class TestPolling:

    @pytest.mark.asyncio
    async def test_start_polls_both_channels(self, poller) -> None:
        poller.start()
        await asyncio.sleep(0.05)

        assert poller.running
        assert poller.latest_soil is not None
        assert poller.latest_environment is not None

        await poller.stop()
        assert not poller.running

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, poller) -> None:
        poller.start()
        tasks = list(poller._tasks)
        poller.start()
        assert poller._tasks == tasks
        await poller.stop()

    @pytest.mark.asyncio
    async def test_stop_waits_for_cancelled_loops(self, poller) -> None:
        poller.start()
        tasks = list(poller._tasks)

        await poller.stop()

        assert len(tasks) == 2
        assert all(task.done() and task.cancelled() for task in tasks)
        assert poller._tasks == []

    @pytest.mark.asyncio
    async def test_stop_when_not_started(self, poller) -> None:
        await poller.stop()
        assert not poller.running

    @pytest.mark.asyncio
    async def test_poll_loop_survives_errors(self) -> None:
        client = FlakyClient()
        poller = TelemetryPoller(client=client)
        poller.running = True
        task = asyncio.create_task(poller._poll_loop(ChannelId.SOIL, 0.01, poller.refresh_soil))
        try:
            await asyncio.sleep(0.1)
        finally:
            poller.running = False
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        assert client.soil_calls >= 2
        assert poller.latest_soil is not None
