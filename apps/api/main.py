"""FastAPI application entrypoint for the front-of-house dashboard."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.errors import register_error_handlers
from apps.api.routers import dashboard, floor, reservations
from apps.api.routers import settings as settings_router
from core.config import settings
from core.logging import setup_logging
from db.session import close_db, init_db


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    setup_logging()
    logger.info(f"Starting {settings.app_name}...")

    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    close_db()


app = FastAPI(
    title=settings.app_name,
    description="Booking rules, pricing and floor management for restaurant staff",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(settings_router.router, prefix=settings.api_v1_prefix)
app.include_router(floor.router, prefix=settings.api_v1_prefix)
app.include_router(reservations.router, prefix=settings.api_v1_prefix)
app.include_router(dashboard.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "app": settings.app_name,
        "status": "running",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.app_env,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
