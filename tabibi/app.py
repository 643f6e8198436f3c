"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from tabibi.api.routers import api_router
from tabibi.config.settings import Settings, get_settings
from tabibi.infrastructure.llm import close_shared_providers
from tabibi.infrastructure.logging.logger import setup_logging

settings = get_settings()

setup_logging(
    level=settings.log_level,
    json_output=not settings.debug,
    silence_noisy_loggers=True,
)

logger = logging.getLogger(__name__)


def _validate_startup_config(settings: Settings) -> None:
    """Warn about configuration the pipeline cannot work well without."""
    missing = [
        name
        for name in ("cerebras_api_key", "groq_api_key", "openrouter_api_key")
        if not getattr(settings, name)
    ]
    if missing:
        logger.warning(
            "Missing provider keys (%s); those phases will fall back", ", ".join(missing)
        )
    if not settings.supabase_url or not settings.supabase_anon_key:
        logger.warning("supabase_url or supabase_anon_key is empty, data fetching will fail")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup and shutdown lifecycle."""
    logger.info("Starting %s", settings.app_name)
    _validate_startup_config(settings)
    yield
    logger.info("Shutting down %s", settings.app_name)
    try:
        await close_shared_providers()
        logger.info("Provider clients closed")
    except Exception as e:
        logger.error("Error closing provider clients: %s", e, exc_info=True)


app = FastAPI(
    title=settings.app_name,
    description="Clinic assistant with a six-phase AI response pipeline",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

app.include_router(api_router, prefix="/api")
