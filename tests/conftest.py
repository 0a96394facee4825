"""Pytest configuration and fixtures for test suite."""

import pytest

from core.channel_health import channel_health
from core.event_hub import event_hub
from core.locale import locale_context
from core.services.telemetry_client import telemetry_client
from core.services.telemetry_poller import telemetry_poller


@pytest.fixture(autouse=True)
def emulated_telemetry():
    """Serve mock telemetry and start every test from an empty cache.

    In emulation mode the telemetry client never calls ThingSpeak, so API
    tests always see the fixed mock soil reading.
    """
    original_emulation = telemetry_client.emulation_mode
    telemetry_client.emulation_mode = True
    channel_health.reset()
    telemetry_poller.reset()
    event_hub.reset()

    yield

    telemetry_client.emulation_mode = original_emulation
    channel_health.reset()
    telemetry_poller.reset()


@pytest.fixture(autouse=True)
def saved_languages():
    """Keep language changes in memory instead of the JSON store.

    Yields the list of language codes the locale context tried to save.
    """
    saved: list[str] = []
    locale_context.configure(load_hook=lambda: None, save_hook=saved.append)

    yield saved

    locale_context.configure(load_hook=lambda: None, save_hook=None)
