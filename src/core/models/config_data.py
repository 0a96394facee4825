from dataclasses import dataclass, field
from typing import Dict

from core.models.channel import ChannelId


@dataclass
class configChannelData:
    id: ChannelId
    channel_id: str = ""
    api_key: str = ""
    # reading attribute -> ThingSpeak feed field
    fields: Dict[str, str] = field(default_factory=dict)
    poll_interval: float = 300.0

@dataclass
class configHistoryData:
    results: int = 24
    capacity: int = 288

@dataclass
class configLocaleData:
    default_language: str = "en"
    store_path: str = "storage/locale.json"

@dataclass
class configData:
    channels: Dict[ChannelId, configChannelData]
    base_url: str = "https://api.thingspeak.com"
    timeout: float = 8.0
    history: configHistoryData = field(default_factory=configHistoryData)
    locale: configLocaleData = field(default_factory=configLocaleData)
    emulation: bool = True
