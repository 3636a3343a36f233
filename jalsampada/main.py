"""
Jalsampada Forms API - FastAPI Application

Main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from jalsampada import __version__
from jalsampada.config import get_settings
from jalsampada.core.dependencies import get_form_registry
from jalsampada.frappe.client import FrappeClient
from jalsampada.routers import forms_router, health_router

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Suppress noisy third-party loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Loads form layouts on startup and closes the Frappe client on shutdown.
    """
    logger.info("Starting Jalsampada Forms API...")
    settings = get_settings()

    registry = get_form_registry()
    logger.info(f"Registered forms: {', '.join(registry.slugs()) or '(none)'}")
    logger.info(f"Jalsampada Forms API started in {settings.environment} mode")

    yield

    logger.info("Shutting down Jalsampada Forms API...")
    await FrappeClient.reset_instance()
    logger.info("Jalsampada Forms API shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title="Jalsampada Forms API",
        description="Metadata-driven record forms for Frappe doctypes",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(health_router)
    app.include_router(forms_router)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jalsampada.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
