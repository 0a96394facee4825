"""
Sensor reading models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReadingSource(Enum):
    """Where a reading came from."""
    THINGSPEAK = "thingspeak"
    MOCK = "mock"
    MANUAL = "manual"


@dataclass(frozen=True)
class SensorReading:
    """
    One snapshot of the soil probe.

    Nutrients are in mg/kg, EC in dS/m, moisture in percent and
    temperature in degrees Celsius. All values must be finite.
    """
    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    electrical_conductivity: float
    soil_moisture: float
    soil_temperature: float
    timestamp: Optional[str] = None
    source: ReadingSource = ReadingSource.THINGSPEAK


@dataclass(frozen=True)
class EnvironmentReading:
    """Ambient conditions next to the field (lux, degrees Celsius, percent)."""
    sunlight_intensity: float
    temperature: float
    humidity: float
    timestamp: Optional[str] = None
    source: ReadingSource = ReadingSource.THINGSPEAK
