import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Topics published by the telemetry poller
SOIL_HEALTH_TOPIC = "soil_health_update"
ENVIRONMENT_TOPIC = "environment_update"


class EventHub:
    """
    In-process publish/subscribe.

    Handlers receive (topic, message). Coroutine handlers are scheduled on the
    service loop; plain handlers run inline when published from the loop and
    via call_soon_threadsafe otherwise. The last message per topic is kept so
    late subscribers and HTTP handlers can read current state.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._last_messages: Dict[str, Any] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def init(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def subscribe(self, topic: str, handler: Callable):
        handlers = self._subscribers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)
        logger.debug(f"Subscribed to {topic}")

    def unsubscribe(self, topic: str, handler: Callable):
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Unsubscribed from {topic}")

    def last_message(self, topic: str) -> Any:
        return self._last_messages.get(topic)

    def reset(self):
        """Drop subscribers, remembered messages and the loop binding."""
        self._subscribers.clear()
        self._last_messages.clear()
        self._loop = None

    def send_all_on_topic(self, topic: str, message: Any):
        self._last_messages[topic] = message
        # Copy so handlers may unsubscribe while being dispatched
        for handler in self._subscribers.get(topic, [])[:]:
            try:
                self._dispatch(handler, topic, message)
            except Exception as e:
                logger.error(f"Error handling message on topic {topic}: {e}")

    def _dispatch(self, handler: Callable, topic: str, message: Any):
        is_async = asyncio.iscoroutinefunction(handler)
        if self._loop is None:
            if is_async:
                logger.warning(f"EventHub loop not initialized. Cannot dispatch async handler for {topic}")
            else:
                handler(topic, message)
            return

        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is self._loop:
            if is_async:
                self._loop.create_task(handler(topic, message))
            else:
                handler(topic, message)
        elif is_async:
            asyncio.run_coroutine_threadsafe(handler(topic, message), self._loop)
        else:
            self._loop.call_soon_threadsafe(handler, topic, message)


# Global instance
event_hub = EventHub()


def init_event_hub(loop):
    """Initialize the global event hub with the given loop."""
    event_hub.init(loop)
