"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gbr_reserve.api.health import router as health_router
from gbr_reserve.api.middleware import RequestContextMiddleware
from gbr_reserve.api.reserves import router as reserves_router
from gbr_reserve.api.tax import router as tax_router
from gbr_reserve.core.config import settings
from gbr_reserve.core.logging import configure_logging, get_logger
from gbr_reserve.core.sentry import init_sentry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and error tracking on startup."""
    configure_logging()
    logger.info(
        "Starting application",
        environment=settings.environment,
        tax_year=settings.tax_year,
    )

    if init_sentry():
        logger.info("Sentry initialized")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="GbR Reserve",
    description="Income tax reserve calculator for German partnerships (GbR)",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health_router)
app.include_router(tax_router)
app.include_router(reserves_router)
