import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from core.models.channel import ChannelId

logger = logging.getLogger(__name__)


class ChannelState(Enum):
    """Telemetry channel states."""
    LIVE = "live"          # Last fetch succeeded
    FALLBACK = "fallback"  # Serving mock data until the next retry


@dataclass
class ChannelHealthMonitor:
    """Tracks fetch failures of one telemetry channel and when to retry it."""
    channel: ChannelId
    initial_retry_delay: float = 30.0  # Seconds before the first live retry
    max_retry_delay: float = 600.0
    backoff_multiplier: float = 2.0

    # State tracking
    state: ChannelState = ChannelState.LIVE
    consecutive_failures: int = 0
    last_success_time: Optional[float] = None
    last_error: Optional[str] = None
    next_retry_time: float = 0.0
    current_backoff_delay: float = field(default=0.0)

    def __post_init__(self):
        self.current_backoff_delay = self.initial_retry_delay

    def record_success(self):
        """Record a successful live fetch."""
        if self.state != ChannelState.LIVE:
            logger.info(f"✓ {self.channel.name} telemetry back online after {self.consecutive_failures} failed fetch(es)")
        self.state = ChannelState.LIVE
        self.last_success_time = time.time()
        self.last_error = None
        self.reset_backoff()

    def record_failure(self, reason: str):
        """Record a failed fetch and schedule the next live attempt."""
        self.consecutive_failures += 1
        self.last_error = reason
        if self.state != ChannelState.FALLBACK:
            logger.warning(f"⚠ {self.channel.name} telemetry unavailable ({reason}), serving mock data")
            self.state = ChannelState.FALLBACK
        delay = self.get_next_retry_delay()
        self.next_retry_time = time.time() + delay
        logger.debug(f"{self.channel.name}: next live attempt in {delay:.0f}s")

    def should_attempt_live(self) -> bool:
        """False while waiting out the backoff after a failure."""
        return self.state == ChannelState.LIVE or time.time() >= self.next_retry_time

    def get_next_retry_delay(self) -> float:
        """Get the delay before the next live attempt, growing it for the one after."""
        delay = self.current_backoff_delay
        self.current_backoff_delay = min(
            self.current_backoff_delay * self.backoff_multiplier,
            self.max_retry_delay
        )
        return delay

    def reset_backoff(self):
        self.current_backoff_delay = self.initial_retry_delay
        self.consecutive_failures = 0
        self.next_retry_time = 0.0

    def snapshot(self) -> dict:
        return {
            "channel": self.channel.value,
            "state": self.state.value,
            "consecutive_failures": self.consecutive_failures,
            "last_success_time": self.last_success_time,
            "last_error": self.last_error,
            "next_retry_in": max(0.0, self.next_retry_time - time.time()) if self.state == ChannelState.FALLBACK else 0.0,
        }


class ChannelHealthRegistry:
    """Holds one health monitor per telemetry channel."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ChannelHealthRegistry, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self.monitors: Dict[ChannelId, ChannelHealthMonitor] = {
            channel: ChannelHealthMonitor(channel=channel) for channel in ChannelId
        }

    def get(self, channel: ChannelId) -> ChannelHealthMonitor:
        return self.monitors[channel]

    def reset(self):
        """Forget all failures (used on restart and in tests)."""
        for channel in ChannelId:
            self.monitors[channel] = ChannelHealthMonitor(channel=channel)

    def snapshot(self) -> list[dict]:
        return [self.monitors[channel].snapshot() for channel in ChannelId]


channel_health = ChannelHealthRegistry()
