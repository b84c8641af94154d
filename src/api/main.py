"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from src.adapters.repository.store import SqliteStore
from src.api.dependencies import build_email_sender
from src.api.errors import register_exception_handlers
from src.api.rate_limit import limiter
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Registration, email verification, login and password reset",
    },
    {
        "name": "admin",
        "description": "Read-only operator views, gated by the X-Admin-Key header",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Loads (or creates) the database file and applies migrations
    - Selects the email backend
    - Flushes and closes the store on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting application...")
    limiter.enabled = settings.rate_limit_enabled

    store = SqliteStore(settings.database_path)
    store.open()

    app.state.store = store
    app.state.email_sender = build_email_sender(settings)

    if settings.email_backend == "smtp" and not (settings.mail_user and settings.mail_password):
        logger.warning("SMTP backend selected but MAIL_USER / MAIL_PASSWORD are empty")
    if not settings.admin_key:
        logger.warning("ADMIN_KEY is not set; admin endpoints will reject every request")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    store.close()
    logger.info("Database flushed and closed")


app = FastAPI(
    title="otpgate",
    description="Account registration API gated by email one-time passcodes",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


# Include v1 API routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
@limiter.exempt
def health_check(request: Request) -> dict:
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and store are healthy. Exempt from the
    default request limit so liveness polling never sees 429.
    """
    request.app.state.store.get("SELECT 1 AS ok")

    return {
        "ok": True,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": f"{int(time.monotonic() - _STARTED_AT)}s",
    }
