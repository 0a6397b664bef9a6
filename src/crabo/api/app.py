"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crabo import __version__
from crabo.api.routes import health_router, snap_router
from crabo.client import CraboClient
from crabo.config import CraboSettings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: CraboSettings) -> None:
    """Configure root logger from settings."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of resources.
    """
    settings: CraboSettings = app.state.settings

    logger.info("Initializing snapshot client...")

    async with CraboClient(settings) as client:
        app.state.crabo_client = client
        logger.info(f"Crabo listens on {settings.host}:{settings.port}")
        logger.info("Application startup complete")

        yield

        # Cleanup
        logger.info("Shutting down application...")
        app.state.crabo_client = None

    logger.info("Application shutdown complete")


def create_app(
    settings: CraboSettings | None = None,
    *,
    title: str = "Crabo API",
    description: str = "Link preview snapshots of videos and web pages",
    version: str = __version__,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If not provided, loaded from environment.
        title: API title for OpenAPI docs
        description: API description for OpenAPI docs
        version: API version

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=lifespan,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(snap_router, prefix="/api/v1")

    return app


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
