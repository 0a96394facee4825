from fastapi import APIRouter, HTTPException

from core.locale import VALID_LANGUAGES, Language, locale_context, parse_language
from schemas import LocaleResponse, LocaleUpdate

router = APIRouter(prefix="/locale", tags=["locale"])


@router.get("", response_model=LocaleResponse)
async def get_locale() -> LocaleResponse:
    """Get the saved display language and the languages available."""
    return LocaleResponse(
        language=locale_context.language.value,
        available=[lang.value for lang in Language],
    )


@router.put("", status_code=204, responses={
    400: {
        "description": "Unsupported language.",
        "content": {
            "application/json": {
                "example": {"detail": f"Invalid language: fr. Valid values are: {VALID_LANGUAGES}"}
            }
        }
    }
})
async def set_locale(update: LocaleUpdate) -> None:
    """Save the display language used when requests do not pass `lang`."""
    try:
        language = parse_language(update.language)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    locale_context.set_language(language)
