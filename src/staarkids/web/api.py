"""FastAPI application factory.

Main entry point for the StaarKids generation Web API.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staarkids.config.app_config import load_app_config
from staarkids.core.model_manager import get_model_manager, run_optimization_loop
from staarkids.db.database import init_db
from staarkids.web.routes import (
    exams_router,
    health_router,
    models_router,
    progress_router,
    quality_router,
    questions_router,
    visuals_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    config = load_app_config()
    init_db()

    interval = config.models.optimize_interval_seconds
    optimizer: asyncio.Task | None = None
    if interval > 0:
        optimizer = asyncio.create_task(run_optimization_loop(get_model_manager(), interval))

    logger.info(
        "api_startup",
        db_path=str(config.db_path),
        optimize_interval_seconds=interval,
        llm_enabled=config.llm.enabled,
    )
    yield

    # Shutdown
    if optimizer is not None:
        optimizer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await optimizer
    logger.info("api_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="StaarKids Generation API",
        description="STAAR-style question and SVG diagram generation service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(questions_router)
    app.include_router(visuals_router)
    app.include_router(quality_router)
    app.include_router(models_router)
    app.include_router(exams_router)
    app.include_router(progress_router)

    return app


# Default app instance for uvicorn
app = create_app()
