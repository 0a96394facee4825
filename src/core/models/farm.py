from enum import Enum
from typing import Optional

from pydantic.dataclasses import dataclass


class AreaUnit(Enum):
    """Land area units accepted on farm records."""
    HECTARES = "hectares"
    ACRES = "acres"
    BIGHA = "bigha"


@dataclass
class Farm:
    """
    A farm record as stored by the farm service.
    Compatible with both dataclass operations and Pydantic validation.
    """
    name: str
    size: float
    unit: AreaUnit = AreaUnit.HECTARES
    crop_type: str = ""
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    sowing_date: Optional[str] = None
    id: Optional[str] = None
