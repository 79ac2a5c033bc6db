# ABOUTME: FastAPI application factory with database and client lifespan.
# ABOUTME: Main entry point for the Cloud Run dispatcher service.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from foul_weather.db.session import close_db
from foul_weather.dispatch.factory import get_pipeline
from foul_weather.logging_setup import configure_logging
from foul_weather.web.routes import api

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: release HTTP and database resources on shutdown."""
    logger.info("app_startup")
    yield
    logger.info("app_shutdown")
    if get_pipeline.cache_info().currsize:
        await get_pipeline().source.aclose()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Foul Weather Dispatch",
        description="Scheduled forecast-discussion rants for NWS offices",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(api.router)
    return app


# Application instance for uvicorn
app = create_app()
