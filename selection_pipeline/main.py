"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from selection_pipeline.core.config import settings
from selection_pipeline.core.logging import setup_logging
from selection_pipeline.errors import AppError, app_error_handler
from selection_pipeline.routers import (
    applicants,
    health,
    stages,
    statuses,
    tasks,
    transition_rules,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.
    
    Configures logging on startup.
    """
    setup_logging()
    logger.info("Starting %s...", settings.APP_NAME)

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Selection-stage progression engine for a recruitment pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(stages.router)
app.include_router(statuses.router)
app.include_router(tasks.router)
app.include_router(applicants.router)
app.include_router(transition_rules.router)
