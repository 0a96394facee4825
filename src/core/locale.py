"""
Display language selection and translations.

The selected language is held by an explicit LocaleContext whose persistence
is delegated to injected load/save hooks. The default hooks come from a small
JSON file store; tests and other callers can supply their own.
"""
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional

from core.config_loader import config_loader
from core.models.channel import SoilParameter
from core.models.soil_health import HealthCategory, ParameterStatus

logger = logging.getLogger(__name__)


class Language(Enum):
    EN = "en"
    HI = "hi"
    PA = "pa"


VALID_LANGUAGES = ", ".join(lang.value for lang in Language)

TRANSLATIONS: Dict[Language, Dict[str, str]] = {
    Language.EN: {
        "soilHealth.overall": "Overall Soil Health",
        "category.excellent": "Excellent",
        "category.good": "Good",
        "category.poor": "Poor",
        "category.very_poor": "Very Poor",
        "recommendation.excellent": "Maintain current soil management practices",
        "recommendation.good": "Apply balanced fertilizer to optimize nutrient levels",
        "recommendation.poor": "Add organic matter and adjust nutrient levels urgently",
        "recommendation.very_poor": "Rebuild soil health urgently - consult agronomist",
        "parameterStatus.optimal": "Optimal",
        "parameterStatus.good": "Good",
        "parameterStatus.needs_attention": "Needs Attention",
        "parameterStatus.critical": "Critical",
        "parameter.nitrogen": "Nitrogen (N)",
        "parameter.phosphorus": "Phosphorus (P)",
        "parameter.potassium": "Potassium (K)",
        "parameter.ph": "pH",
        "parameter.ec": "Electrical Conductivity",
        "parameter.moisture": "Soil Moisture",
        "parameter.temperature": "Soil Temperature",
    },
    Language.HI: {
        "soilHealth.overall": "समग्र मिट्टी स्वास्थ्य",
        "category.excellent": "उत्कृष्ट",
        "category.good": "अच्छा",
        "category.poor": "खराब",
        "category.very_poor": "बहुत खराब",
        "recommendation.excellent": "वर्तमान मिट्टी प्रबंधन पद्धतियों को जारी रखें",
        "recommendation.good": "पोषक तत्वों के स्तर को बेहतर बनाने के लिए संतुलित उर्वरक डालें",
        "recommendation.poor": "जैविक पदार्थ मिलाएं और पोषक तत्वों के स्तर को तुरंत समायोजित करें",
        "recommendation.very_poor": "मिट्टी के स्वास्थ्य को तुरंत सुधारें - कृषि विशेषज्ञ से परामर्श करें",
        "parameterStatus.optimal": "इष्टतम",
        "parameterStatus.good": "अच्छा",
        "parameterStatus.needs_attention": "ध्यान देने की आवश्यकता",
        "parameterStatus.critical": "गंभीर",
        "parameter.nitrogen": "नाइट्रोजन (N)",
        "parameter.phosphorus": "फास्फोरस (P)",
        "parameter.potassium": "पोटैशियम (K)",
        "parameter.ph": "पीएच",
        "parameter.ec": "विद्युत चालकता",
        "parameter.moisture": "मिट्टी की नमी",
        "parameter.temperature": "मिट्टी का तापमान",
    },
    Language.PA: {
        "soilHealth.overall": "ਸਮੁੱਚੀ ਮਿੱਟੀ ਸਿਹਤ",
        "category.excellent": "ਸ਼ਾਨਦਾਰ",
        "category.good": "ਚੰਗਾ",
        "category.poor": "ਮਾੜਾ",
        "category.very_poor": "ਬਹੁਤ ਮਾੜਾ",
        "recommendation.excellent": "ਮੌਜੂਦਾ ਮਿੱਟੀ ਪ੍ਰਬੰਧਨ ਅਭਿਆਸ ਜਾਰੀ ਰੱਖੋ",
        "recommendation.good": "ਪੋਸ਼ਕ ਤੱਤਾਂ ਦੇ ਪੱਧਰ ਨੂੰ ਬਿਹਤਰ ਬਣਾਉਣ ਲਈ ਸੰਤੁਲਿਤ ਖਾਦ ਪਾਓ",
        "recommendation.poor": "ਜੈਵਿਕ ਪਦਾਰਥ ਮਿਲਾਓ ਅਤੇ ਪੋਸ਼ਕ ਤੱਤਾਂ ਦੇ ਪੱਧਰ ਨੂੰ ਤੁਰੰਤ ਠੀਕ ਕਰੋ",
        "recommendation.very_poor": "ਮਿੱਟੀ ਦੀ ਸਿਹਤ ਨੂੰ ਤੁਰੰਤ ਸੁਧਾਰੋ - ਖੇਤੀਬਾੜੀ ਮਾਹਿਰ ਨਾਲ ਸਲਾਹ ਕਰੋ",
        "parameterStatus.optimal": "ਵਧੀਆ",
        "parameterStatus.good": "ਚੰਗਾ",
        "parameterStatus.needs_attention": "ਧਿਆਨ ਦੀ ਲੋੜ",
        "parameterStatus.critical": "ਗੰਭੀਰ",
        "parameter.nitrogen": "ਨਾਈਟ੍ਰੋਜਨ (N)",
        "parameter.phosphorus": "ਫਾਸਫੋਰਸ (P)",
        "parameter.potassium": "ਪੋਟਾਸ਼ੀਅਮ (K)",
        "parameter.ph": "ਪੀਐਚ",
        "parameter.ec": "ਬਿਜਲਈ ਚਾਲਕਤਾ",
        "parameter.moisture": "ਮਿੱਟੀ ਦੀ ਨਮੀ",
        "parameter.temperature": "ਮਿੱਟੀ ਦਾ ਤਾਪਮਾਨ",
    },
}

LoadHook = Callable[[], Optional[str]]
SaveHook = Callable[[str], None]


def parse_language(code: str) -> Language:
    """Language for a code such as "hi"; raises ValueError for unknown codes."""
    try:
        return Language(code.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid language: {code}. Valid values are: {VALID_LANGUAGES}") from None


class JsonLocaleStore:
    """Persists the selected language code in a small JSON file."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f).get("language")
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.error(f"Failed to read language selection from {self.path}: {e}")
            return None

    def save(self, code: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({"language": code}, f)


class LocaleContext:
    """The current display language plus the hooks that persist it."""

    def __init__(self, default: Language = Language.EN,
                 load_hook: Optional[LoadHook] = None,
                 save_hook: Optional[SaveHook] = None):
        self.default = default
        self.language = default
        self._load_hook = load_hook
        self._save_hook = save_hook
        self.load()

    def configure(self, load_hook: Optional[LoadHook], save_hook: Optional[SaveHook]):
        """Swap the persistence hooks and reload the selection through them."""
        self._load_hook = load_hook
        self._save_hook = save_hook
        self.load()

    def load(self) -> Language:
        saved = self._load_hook() if self._load_hook else None
        if isinstance(saved, str) and saved:
            try:
                self.language = parse_language(saved)
                return self.language
            except ValueError:
                logger.warning(f"Ignoring saved language '{saved}', using {self.default.value}")
        self.language = self.default
        return self.language

    def set_language(self, language: Language):
        """Persist the selection, then switch to it. A failing save leaves the current language."""
        if self._save_hook:
            self._save_hook(language.value)
        self.language = language
        logger.info(f"Display language set to {language.value}")

    def translate(self, key: str, language: Optional[Language] = None) -> str:
        """Translated text for `key`, or the key itself when no entry exists."""
        return TRANSLATIONS[language or self.language].get(key, key)

    def category_label(self, category: HealthCategory, language: Optional[Language] = None) -> str:
        return self.translate(f"category.{category.name.lower()}", language)

    def recommendation(self, category: HealthCategory, language: Optional[Language] = None) -> str:
        return self.translate(f"recommendation.{category.name.lower()}", language)

    def status_label(self, status: ParameterStatus, language: Optional[Language] = None) -> str:
        return self.translate(f"parameterStatus.{status.name.lower()}", language)

    def parameter_label(self, parameter: SoilParameter, language: Optional[Language] = None) -> str:
        return self.translate(f"parameter.{parameter.value}", language)


def _default_language() -> Language:
    try:
        return parse_language(config_loader.get_locale_config().default_language)
    except ValueError as e:
        logger.error(f"{e}. Falling back to English")
        return Language.EN


_store = JsonLocaleStore(config_loader.get_locale_store_path())

# Global instance
locale_context = LocaleContext(_default_language(), load_hook=_store.load, save_hook=_store.save)
