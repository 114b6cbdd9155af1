"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, uvicorn, compliance_portal.api, compliance_portal.observability, compliance_portal.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from compliance_portal import __version__
from compliance_portal.api import api_router
from compliance_portal.api.deps.dependencies import get_service_cache
from compliance_portal.boundary.db.create_tables import create_all_tables
from compliance_portal.configs import get_settings
from compliance_portal.observability.logger import configure_logging
from compliance_portal.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates tables on startup; on shutdown waits for in-flight ingestions
    before dropping cached services.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    await create_all_tables()
    logger.info("Database tables ready")

    yield

    cache = get_service_cache()
    pending = cache.task_registry.pending
    if pending:
        logger.info(f"Waiting for {pending} ingestion task(s) to finish")
        await cache.task_registry.wait_all()
    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Compliance Portal API",
        description="Regulatory document search with cited answers",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Observability middleware; correlation must wrap request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "compliance_portal.main:app",
        host="0.0.0.0",
        port=8000,
    )
