"""
Server-sent event streams fed by the event hub.
"""
import asyncio
from typing import Any, AsyncIterator, Callable, Optional

from pydantic import BaseModel

from core.event_hub import event_hub


def format_event(topic: str, payload: BaseModel) -> str:
    return f"event: {topic}\ndata: {payload.model_dump_json()}\n\n"


async def topic_events(topic: str, render: Callable[[Any], BaseModel],
                       limit: Optional[int] = None) -> AsyncIterator[str]:
    """
    Yield every message published on `topic` as a server-sent event.

    The last message already published, if any, goes out first so a new
    client does not wait a whole poll interval. Ends after `limit` events,
    or when the client disconnects.
    """
    queue: asyncio.Queue = asyncio.Queue()

    def on_message(_topic: str, message: Any):
        queue.put_nowait(message)

    event_hub.subscribe(topic, on_message)
    sent = 0
    try:
        latest = event_hub.last_message(topic)
        if latest is not None:
            yield format_event(topic, render(latest))
            sent += 1
        while limit is None or sent < limit:
            message = await queue.get()
            yield format_event(topic, render(message))
            sent += 1
    finally:
        event_hub.unsubscribe(topic, on_message)
