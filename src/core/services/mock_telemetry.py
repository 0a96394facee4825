"""
Synthetic telemetry used when the live channels are unreachable or the
backend runs in emulation mode.
"""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.models.sensor_reading import EnvironmentReading, ReadingSource, SensorReading

# Uniform ranges for generated history points
SOIL_RANGES = {
    "nitrogen": (40.0, 60.0),
    "phosphorus": (20.0, 35.0),
    "potassium": (140.0, 180.0),
    "ph": (6.0, 7.5),
    "electrical_conductivity": (0.5, 1.3),
    "soil_moisture": (60.0, 80.0),
    "soil_temperature": (20.0, 30.0),
}
ENVIRONMENT_RANGES = {
    "sunlight_intensity": (30000.0, 60000.0),
    "temperature": (20.0, 35.0),
    "humidity": (65.0, 85.0),
}
HISTORY_STEP = timedelta(hours=1)


def _now_iso(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def mock_soil_reading(now: Optional[datetime] = None) -> SensorReading:
    return SensorReading(
        nitrogen=45.2,
        phosphorus=23.8,
        potassium=156.4,
        ph=6.5,
        electrical_conductivity=0.8,
        soil_moisture=68.5,
        soil_temperature=24.3,
        timestamp=_now_iso(now),
        source=ReadingSource.MOCK,
    )


def mock_environment_reading(now: Optional[datetime] = None) -> EnvironmentReading:
    return EnvironmentReading(
        sunlight_intensity=45000.0,
        temperature=28.5,
        humidity=72.1,
        timestamp=_now_iso(now),
        source=ReadingSource.MOCK,
    )


def _history_timestamps(results: int, now: Optional[datetime]) -> List[str]:
    now = now or datetime.now(timezone.utc)
    return [(now - (results - 1 - i) * HISTORY_STEP).isoformat() for i in range(results)]


def mock_soil_history(results: int = 24, rng: Optional[random.Random] = None,
                      now: Optional[datetime] = None) -> List[SensorReading]:
    """`results` hourly soil readings ending at `now`, oldest first."""
    rng = rng or random.Random()
    return [
        SensorReading(
            **{name: rng.uniform(low, high) for name, (low, high) in SOIL_RANGES.items()},
            timestamp=timestamp,
            source=ReadingSource.MOCK,
        )
        for timestamp in _history_timestamps(results, now)
    ]


def mock_environment_history(results: int = 24, rng: Optional[random.Random] = None,
                             now: Optional[datetime] = None) -> List[EnvironmentReading]:
    """`results` hourly environment readings ending at `now`, oldest first."""
    rng = rng or random.Random()
    return [
        EnvironmentReading(
            **{name: rng.uniform(low, high) for name, (low, high) in ENVIRONMENT_RANGES.items()},
            timestamp=timestamp,
            source=ReadingSource.MOCK,
        )
        for timestamp in _history_timestamps(results, now)
    ]
