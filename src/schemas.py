from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from core.models.sensor_reading import ReadingSource


class AppHealthOK(BaseModel):
    status: str
    app: str


class SensorReadingIn(BaseModel):
    """A soil reading submitted for scoring. NaN and infinity are rejected."""
    model_config = ConfigDict(allow_inf_nan=False)

    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    electrical_conductivity: float
    soil_moisture: float
    soil_temperature: float
    timestamp: Optional[str] = None


class SensorReadingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    electrical_conductivity: float
    soil_moisture: float
    soil_temperature: float
    timestamp: Optional[str] = None
    source: ReadingSource


class EnvironmentReadingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sunlight_intensity: float
    temperature: float
    humidity: float
    timestamp: Optional[str] = None
    source: ReadingSource


class ParameterScore(BaseModel):
    parameter: str
    label: str
    score: float
    weight: float
    status: str
    status_label: str


class ScoreBreakdownOut(BaseModel):
    overall_score: int
    raw_score: float
    category: str
    category_label: str
    recommendation: str
    language: str
    parameters: List[ParameterScore]


class SoilHealthResponse(BaseModel):
    reading: SensorReadingOut
    health: ScoreBreakdownOut


class SoilHistoryList(BaseModel):
    list: List[SoilHealthResponse]


class EnvironmentHistoryList(BaseModel):
    list: List[EnvironmentReadingOut]


class ChannelStatus(BaseModel):
    channel: str
    state: str
    consecutive_failures: int
    last_success_time: Optional[float] = None
    last_error: Optional[str] = None
    next_retry_in: float = 0.0


class TelemetryStatusResponse(BaseModel):
    emulation: bool
    channels: List[ChannelStatus]


class FarmStatsResponse(BaseModel):
    total_farms: int
    total_size_hectares: float


class LocaleResponse(BaseModel):
    language: str
    available: List[str]


class LocaleUpdate(BaseModel):
    language: str
