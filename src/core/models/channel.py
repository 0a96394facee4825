"""Channel and parameter enumerations for type-safe telemetry references."""
from enum import Enum


class ChannelId(Enum):
    """Telemetry channels published by the field station."""
    SOIL = "soil"
    ENVIRONMENT = "environment"


class SoilParameter(Enum):
    """The seven soil dimensions scored by the health index."""
    NITROGEN = "nitrogen"
    PHOSPHORUS = "phosphorus"
    POTASSIUM = "potassium"
    PH = "ph"
    EC = "ec"
    MOISTURE = "moisture"
    TEMPERATURE = "temperature"
