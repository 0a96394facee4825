from fastapi import APIRouter

from routers import environment, farms, locale, recommendations, soil, telemetry

router = APIRouter()

# include sub-routers
router.include_router(soil.router)
router.include_router(environment.router)
router.include_router(telemetry.router)
router.include_router(recommendations.router)
router.include_router(farms.router)
router.include_router(locale.router)
