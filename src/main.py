from contextlib import asynccontextmanager
from typing import List
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.config_loader import config_loader
from core.service_manager import service_manager
from routers.api import router as api_router
from schemas import AppHealthOK

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    app_name: str = "Soil Health Dashboard API"
    debug: bool = False
    # Dashboard frontends allowed to call the API
    cors_origins: List[str] = ["*"]
    # Mock telemetry only, ThingSpeak is never called.
    # EMULATION_MODE=true|false overrides the config file.
    emulation_mode: bool = os.getenv("EMULATION_MODE", "").lower() == "true" \
        if os.getenv("EMULATION_MODE") else config_loader.get_emulation_mode()


settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Poll the telemetry channels for as long as the app is up."""
    logger.info(
        "Starting background services with %s telemetry", "mock" if settings.emulation_mode else "live"
    )
    await service_manager.start_services(emulation=settings.emulation_mode)

    try:
        yield
    finally:
        logger.info("Stopping background services")
        await service_manager.stop_services()


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 without echoing the rejected input, which may be NaN or infinity and is not valid JSON."""
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": errors})


@app.get("/", tags=["meta"])
async def read_root() -> dict[str, str]:
    return {"message": settings.app_name}


@app.get("/health", tags=["meta"], response_model=AppHealthOK)
async def healthcheck() -> AppHealthOK:
    return AppHealthOK(status="ok", app=settings.app_name)


app.include_router(api_router, prefix="/api")
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
