"""
SKEMA RAJA Auto Check-in — dashboard API entry point.

This is the **only** file that assembles the app.  The store, browser
executor, gateway clients and runner are built once here and kept on
``app.state``; handlers reach them through ``api/v1/deps.py``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autocheckin.api.v1.api import api_router
from autocheckin.api.v1.endpoints.checkin import limiter
from autocheckin.container import build_runner
from autocheckin.core.config import settings
from autocheckin.core.exceptions import register_exception_handlers
from autocheckin.db.store import JsonStore
from autocheckin.services.runner import CheckinRunner

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = app.state.store.load_config()
    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    logger.info("📍 Location: %s (%s, %s)", config.location_name, config.latitude, config.longitude)
    yield
    await app.state.runner.drain_notifications()
    await app.state.fonnte.aclose()
    await app.state.directory.aclose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(
    store: JsonStore | None = None,
    runner: CheckinRunner | None = None,
) -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Automated SKEMA RAJA attendance check-in dashboard",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    store = store or JsonStore.from_settings(settings)
    runner = runner or build_runner(settings, store)
    application.state.store = store
    application.state.runner = runner
    application.state.fonnte = runner.fonnte
    application.state.directory = runner.directory
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
