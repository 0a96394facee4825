import json
import logging
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models.channel import ChannelId
from core.models.config_data import configChannelData, configData, configHistoryData, configLocaleData

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

SOIL_FIELDS = {
    "nitrogen": "field1",
    "phosphorus": "field2",
    "potassium": "field3",
    "ph": "field4",
    "electrical_conductivity": "field5",
    "soil_moisture": "field6",
    "soil_temperature": "field7",
}
ENVIRONMENT_FIELDS = {
    "sunlight_intensity": "field1",
    "temperature": "field2",
    "humidity": "field3",
}


class TelemetryEnv(BaseSettings):
    """Channel credentials that may be supplied through the environment."""
    model_config = SettingsConfigDict(env_prefix="AGRI_", extra="ignore")

    soil_channel_id: Optional[str] = None
    soil_api_key: Optional[str] = None
    env_channel_id: Optional[str] = None
    env_api_key: Optional[str] = None


class ConfigLoader:
    """Loads and manages dashboard configuration from JSON file."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigLoader, cls).__new__(cls)
            cls._instance._config = cls._get_default_config()
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self.load_config()
            self._initialized = True

    @staticmethod
    def get_config_path() -> Path:
        """Get the path to the dashboard_config.json file."""
        return PROJECT_ROOT / "config" / "dashboard_config.json"

    def load_config(self, config_path: Optional[Path] = None):
        """Load configuration from JSON file, then apply environment overrides."""
        config_path = config_path or self.get_config_path()

        # Start from defaults so partial files still yield a complete config
        self._config = self._get_default_config()

        if not config_path.exists():
            logger.error(f"Configuration file not found: {config_path}")
            self._apply_env_overrides()
            return

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                json_data = json.load(f)

            telemetry = json_data.get("telemetry", {})
            self._config.base_url = telemetry.get("base_url", self._config.base_url)
            self._config.timeout = float(telemetry.get("timeout", self._config.timeout))

            for channel_key, channel_cfg in telemetry.get("channels", {}).items():
                channel = ChannelId[channel_key]
                default = self._config.channels[channel]
                unknown = set(channel_cfg.get("fields", {})) - set(default.fields)
                if unknown:
                    raise ValueError(f"unknown {channel_key} field(s): {sorted(unknown)}")
                self._config.channels[channel] = configChannelData(
                    channel,
                    channel_id=str(channel_cfg.get("channel_id", default.channel_id)),
                    api_key=channel_cfg.get("api_key", default.api_key),
                    fields={**default.fields, **channel_cfg.get("fields", {})},
                    poll_interval=float(channel_cfg.get("poll_interval", default.poll_interval)),
                )

            history = json_data.get("history", {})
            self._config.history = configHistoryData(
                results=int(history.get("results", 24)),
                capacity=int(history.get("capacity", 288)),
            )

            locale = json_data.get("locale", {})
            self._config.locale = configLocaleData(
                default_language=locale.get("default_language", "en"),
                store_path=locale.get("store_path", "storage/locale.json"),
            )

            self._config.emulation = json_data.get("emulation", True)
            logger.info(f"Configuration loaded from {config_path}")

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            self._config = self._get_default_config()

        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid configuration in {config_path}: {e}")
            self._config = self._get_default_config()

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        env = TelemetryEnv()
        soil = self._config.channels[ChannelId.SOIL]
        environment = self._config.channels[ChannelId.ENVIRONMENT]
        if env.soil_channel_id:
            soil.channel_id = env.soil_channel_id
        if env.soil_api_key:
            soil.api_key = env.soil_api_key
        if env.env_channel_id:
            environment.channel_id = env.env_channel_id
        if env.env_api_key:
            environment.api_key = env.env_api_key

    @staticmethod
    def _get_default_config() -> configData:
        """Return default configuration."""
        return configData(
            emulation=True,
            channels={
                ChannelId.SOIL: configChannelData(
                    ChannelId.SOIL, channel_id="", api_key="", fields=dict(SOIL_FIELDS), poll_interval=300.0
                ),
                ChannelId.ENVIRONMENT: configChannelData(
                    ChannelId.ENVIRONMENT, channel_id="", api_key="", fields=dict(ENVIRONMENT_FIELDS), poll_interval=120.0
                ),
            },
        )

    def get_emulation_mode(self) -> bool:
        """Get the emulation mode setting."""
        return self._config.emulation

    def get_channel_config(self, channel: ChannelId) -> configChannelData:
        """Get configuration for a telemetry channel."""
        return self._config.channels[channel]

    def get_base_url(self) -> str:
        return self._config.base_url

    def get_timeout(self) -> float:
        return self._config.timeout

    def get_poll_interval(self, channel: ChannelId) -> float:
        return self.get_channel_config(channel).poll_interval

    def get_history_config(self) -> configHistoryData:
        return self._config.history

    def get_locale_config(self) -> configLocaleData:
        return self._config.locale

    def get_locale_store_path(self) -> Path:
        path = Path(self._config.locale.store_path)
        return path if path.is_absolute() else PROJECT_ROOT / path


# Global singleton instance
config_loader = ConfigLoader()
