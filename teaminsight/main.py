"""TeamInsight Reflection API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TeamInsightError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and oracle client initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py, registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teaminsight.api.error_handlers import register_error_handlers
from teaminsight.api.routes import health, lecturer_reflection, team_reflection
from teaminsight.config import get_settings
from teaminsight.infrastructure.anthropic_client import init_llm_client
from teaminsight.infrastructure.database import close_db, init_db
from teaminsight.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_llm_client(
        settings.anthropic_api_key,
        settings.reflection_model,
        default_max_tokens=settings.reflection_max_tokens,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    logger.info("TeamInsight reflection API started")
    yield
    logger.info("TeamInsight reflection API shutting down")
    await close_db()


app = FastAPI(
    title="TeamInsight Reflection API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes - explicit registration
app.include_router(health.router)
app.include_router(team_reflection.router)
app.include_router(lecturer_reflection.router)

register_error_handlers(app)
