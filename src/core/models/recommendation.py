"""
Fertilizer recommendation payloads.

The recommendation service has shipped two response shapes over time: a
plain ML prediction and an LLM-enhanced report built on top of it. Both are
resolved here, once, into a tagged union keyed by `schema_version` so display
code never has to check for optional keys.
"""
from typing import Annotated, Any, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

Amount = Union[float, str]

# Keys that only appear in the LLM-enhanced report
LLM_SECTIONS = (
    "primary_fertilizer",
    "secondary_fertilizer",
    "soil_condition",
    "application_timing",
    "cost_estimate",
    "organic_alternatives",
)
ML_SECTIONS = ("ml_predictions", "ml_model_prediction")


class RecommendationPayloadError(ValueError):
    """Raised when an upstream payload matches no known schema version."""


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MLPrediction(_Lenient):
    primary_fertilizer: str = Field("Unknown", validation_alias=AliasChoices("Primary_Fertilizer", "primary_fertilizer"))
    secondary_fertilizer: str = Field("None", validation_alias=AliasChoices("Secondary_Fertilizer", "secondary_fertilizer"))
    ph_amendment: str = Field("None needed", validation_alias=AliasChoices("pH_Amendment", "ph_amendment"))
    ph_status: str = Field("Optimal", validation_alias=AliasChoices("pH_Status", "ph_status"))
    n_status: str = Field("Optimal", validation_alias=AliasChoices("N_Status", "n_status"))
    p_status: str = Field("Optimal", validation_alias=AliasChoices("P_Status", "p_status"))
    k_status: str = Field("Optimal", validation_alias=AliasChoices("K_Status", "k_status"))


class FertilizerProduct(_Lenient):
    name: str = "Unknown"
    npk: Optional[str] = None
    rate_per_hectare: Optional[Amount] = None
    total_cost: Optional[Amount] = None
    application_notes: Optional[str] = None
    application_method: Optional[str] = None
    reason: Optional[str] = None


class NutrientValue(_Lenient):
    kg_per_ha: Optional[float] = None
    mg_per_kg: Optional[float] = None


class SoilTestValues(_Lenient):
    ph: Optional[float] = Field(None, validation_alias=AliasChoices("pH", "ph"))
    nitrogen: Optional[NutrientValue] = Field(None, validation_alias=AliasChoices("N", "nitrogen"))
    phosphorus: Optional[NutrientValue] = Field(None, validation_alias=AliasChoices("P", "phosphorus"))
    potassium: Optional[NutrientValue] = Field(None, validation_alias=AliasChoices("K", "potassium"))
    soil_temperature: Optional[float] = None
    soil_moisture: Optional[float] = None
    ec: Optional[float] = Field(None, validation_alias=AliasChoices("EC_mmhos_cm2", "ec"))


class SoilCondition(_Lenient):
    ph_status: str = "Optimal"
    n_status: str = "Optimal"
    p_status: str = "Optimal"
    k_status: str = "Optimal"
    soil_test_values: Optional[SoilTestValues] = None
    nutrient_deficiencies: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ApplicationTiming(_Lenient):
    primary: Optional[str] = Field(None, validation_alias=AliasChoices("primary_fertilizer", "primary"))
    secondary: Optional[str] = Field(None, validation_alias=AliasChoices("secondary_fertilizer", "secondary"))
    organics: Optional[str] = Field(None, validation_alias=AliasChoices("organic_options", "organics"))


class CostEstimate(_Lenient):
    primary: Optional[Amount] = Field(None, validation_alias=AliasChoices("primary_fertilizer", "primary"))
    secondary: Optional[Amount] = Field(None, validation_alias=AliasChoices("secondary_fertilizer", "secondary"))
    organics: Optional[Amount] = Field(None, validation_alias=AliasChoices("organic_options", "organics"))
    total: Optional[Amount] = Field(None, validation_alias=AliasChoices("total_estimate", "total"))


class OrganicAlternative(_Lenient):
    name: str
    amount_kg: Optional[float] = None
    cost: Optional[float] = None
    reason: Optional[str] = None
    timing: Optional[str] = None


class ReportMeta(_Lenient):
    generated_at: Optional[str] = None
    region: Optional[str] = None
    currency: Optional[str] = None
    price_source: Optional[str] = None


class MLOnlyRecommendation(_Lenient):
    schema_version: Literal["ml_only"] = "ml_only"
    ml_prediction: MLPrediction = Field(default_factory=MLPrediction)


class LLMEnhancedRecommendation(_Lenient):
    schema_version: Literal["llm_enhanced"] = "llm_enhanced"
    ml_prediction: MLPrediction = Field(default_factory=MLPrediction)
    primary_fertilizer: FertilizerProduct
    secondary_fertilizer: FertilizerProduct
    soil_condition: SoilCondition
    application_timing: Optional[ApplicationTiming] = None
    cost_estimate: Optional[CostEstimate] = None
    organic_alternatives: List[OrganicAlternative] = Field(default_factory=list)
    meta: Optional[ReportMeta] = Field(None, validation_alias=AliasChoices("_meta", "meta"))


RecommendationResult = Annotated[
    Union[MLOnlyRecommendation, LLMEnhancedRecommendation],
    Field(discriminator="schema_version"),
]

_result_adapter = TypeAdapter(RecommendationResult)


def detect_schema_version(payload: Mapping[str, Any]) -> str:
    """Identify which response shape a raw payload follows."""
    explicit = payload.get("schema_version")
    if explicit in ("ml_only", "llm_enhanced"):
        return explicit
    if any(key in payload for key in LLM_SECTIONS):
        return "llm_enhanced"
    if any(key in payload for key in ML_SECTIONS):
        return "ml_only"
    raise RecommendationPayloadError(
        f"Unrecognised recommendation payload (keys: {sorted(payload.keys())})"
    )


def resolve_recommendation(payload: Mapping[str, Any]) -> Union[MLOnlyRecommendation, LLMEnhancedRecommendation]:
    """
    Resolve a raw upstream payload into a typed recommendation.

    Sections the LLM report omits are filled from the ML prediction, the same
    way the dashboard has always displayed them.
    """
    if not isinstance(payload, Mapping):
        raise RecommendationPayloadError("Recommendation payload must be a JSON object")

    version = detect_schema_version(payload)
    ml = payload.get("ml_predictions") or payload.get("ml_model_prediction") or {}
    if not isinstance(ml, Mapping):
        raise RecommendationPayloadError("ML prediction section must be a JSON object")

    body = dict(payload)
    body["schema_version"] = version
    body["ml_prediction"] = ml

    if version == "llm_enhanced":
        prediction = MLPrediction.model_validate(ml)
        if not body.get("primary_fertilizer"):
            body["primary_fertilizer"] = {"name": prediction.primary_fertilizer}
        if not body.get("secondary_fertilizer"):
            body["secondary_fertilizer"] = {"name": prediction.secondary_fertilizer}
        if not body.get("soil_condition"):
            body["soil_condition"] = {
                "ph_status": prediction.ph_status,
                "n_status": prediction.n_status,
                "p_status": prediction.p_status,
                "k_status": prediction.k_status,
            }

    try:
        return _result_adapter.validate_python(body)
    except ValidationError as e:
        raise RecommendationPayloadError(f"Invalid {version} recommendation payload: {e}") from e
