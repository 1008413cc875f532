"""
verse-guidance - Main Application Entry Point

- FastAPI app with lifespan handler
- uvicorn verse_guidance.main:app

Patterns Applied:
- Lifespan context manager
- One-time configure_logging() at startup
"""

import random
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from verse_guidance.api.guidance import guidance_router
from verse_guidance.api.health import get_health_service
from verse_guidance.api.health import router as health_router
from verse_guidance.clients.verse_source import AlQuranCloudClient
from verse_guidance.core.config import get_settings
from verse_guidance.core.logging import configure_logging, get_logger
from verse_guidance.core.tracing import configure_tracing
from verse_guidance.matching.engine import VerseGuidanceEngine
from verse_guidance.matching.themes import ThemeCatalog

settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_output=settings.log_json,
    service_name=settings.service_name,
)

logger = get_logger(__name__)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the client, catalog and engine on startup; close the client on shutdown."""
    # =========================================================================
    # STARTUP
    # =========================================================================
    logger.info(
        "startup",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
    )

    if settings.tracing_enabled:
        configure_tracing(
            service_name=settings.service_name,
            service_version=settings.version,
            console_export=settings.tracing_console_export,
        )
        logger.info("tracing_configured")

    health = get_health_service()

    catalog_path = Path(settings.theme_catalog_path) if settings.theme_catalog_path else None
    catalog = ThemeCatalog(catalog_path)
    health.set_catalog_loaded(True)
    logger.info("theme_catalog_loaded", themes=catalog.theme_names)

    rng = random.Random(settings.random_seed)
    client = AlQuranCloudClient(
        base_url=settings.verse_api_base_url,
        timeout=settings.request_timeout,
        original_edition=settings.original_edition,
        translation_edition=settings.translation_edition,
        audio_edition=settings.audio_edition,
        rng=rng,
    )
    app.state.engine = VerseGuidanceEngine(
        client,
        catalog=catalog,
        rng=rng,
        cache_ttl=settings.cache_ttl_seconds,
        language=settings.search_language,
        initial_threshold=settings.initial_match_threshold,
        additional_threshold=settings.additional_match_threshold,
    )
    app.state.environment = settings.environment
    health.set_engine_ready(True)

    yield

    # =========================================================================
    # SHUTDOWN
    # =========================================================================
    logger.info("shutdown", service=settings.service_name)

    health.set_engine_ready(False)
    app.state.engine = None
    await client.close()


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="verse-guidance",
    description="Matches personal goals to thematically relevant Quran passages",
    version=settings.version,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(guidance_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint pointing to docs."""
    return {
        "service": settings.service_name,
        "version": settings.version,
        "docs": "/docs",
    }
