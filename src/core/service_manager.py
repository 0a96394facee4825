# External libs
import asyncio
import logging

# Internal libs
from core.channel_health import channel_health
from core.event_hub import event_hub, init_event_hub
from core.services.telemetry_client import telemetry_client
from core.services.telemetry_poller import telemetry_poller

logger = logging.getLogger(__name__)


class ServiceManager:

    def __init__(self):
        self.running = False

    async def start_services(self, emulation: bool = False):
        """Start global background services if not already started.
        Args:
            emulation: When True, serve mock telemetry and never call ThingSpeak.
        """
        if self.running:
            return

        logger.info("Starting background services...")
        loop = asyncio.get_running_loop()

        # Init Event Hub
        init_event_hub(loop)

        # Telemetry client: live channels or mock data only
        telemetry_client.emulation_mode = emulation
        channel_health.reset()

        # Poller (scores soil readings and publishes updates)
        telemetry_poller.start()

        self.running = True
        logger.info("Background services started.")

    async def stop_services(self):
        """Stop background services."""
        self.running = False
        await telemetry_poller.stop()
        event_hub.reset()
        logger.info("Background services stopped.")


service_manager = ServiceManager()
