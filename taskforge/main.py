"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel

from taskforge.api.auth import router as auth_router
from taskforge.api.error_handlers import register_error_handlers
from taskforge.api.health import router as health_router
from taskforge.api.tasks import router as tasks_router
from taskforge.config import get_settings
from taskforge.db.session import get_engine
from taskforge.logging_config import configure_logging
from taskforge.services.tokens import get_token_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and load the signing secret once on startup."""
    settings = get_settings()
    settings.validate()
    get_token_service()

    if settings.AUTO_CREATE_TABLES:
        # Import models to register them with SQLModel
        from taskforge.models import Task, User  # noqa: F401
        SQLModel.metadata.create_all(get_engine())
        logger.info("Database tables ensured")

    yield


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="TaskForge API",
        description="Multi-user task tracking API with per-user ownership isolation",
        version="0.1.0",
        lifespan=lifespan,
    )

    cors_origins = [origin for origin in {settings.FRONTEND_URL, "http://localhost:3000"} if origin]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(tasks_router)

    return app


app = create_app()
