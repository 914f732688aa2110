import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.engine import Engine

from skima.core.config import Settings, get_settings
from skima.core.database import build_engine, build_session_factory, init_db
from skima.core.logging_config import setup_logging
from skima.api.endpoints import collaborators, evolution, health, role_profiles, skills

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the Skima API.

    All process-wide resources (settings, engine, session factory) are created
    here and attached to app.state; nothing is initialized at import time.

    Args:
        settings: Explicit settings (defaults to environment / .env)
        engine: Pre-built engine, e.g. an in-memory database for tests
    """
    settings = settings or get_settings()
    owns_engine = engine is None
    engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for startup and shutdown events.
        """
        setup_logging(settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
        logger.info("Starting up Skima API...")
        init_db(engine)

        yield

        logger.info("Shutting down Skima API...")
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Skills matrix tracking and evolution analytics",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Evolution first: /skills/evolution must not be shadowed by the skills router
    app.include_router(evolution.router, prefix=settings.API_PREFIX)
    app.include_router(skills.router, prefix=settings.API_PREFIX)
    app.include_router(collaborators.router, prefix=settings.API_PREFIX)
    app.include_router(role_profiles.router, prefix=settings.API_PREFIX)
    app.include_router(health.router)

    @app.get("/")
    def root():
        """Root endpoint - API health check"""
        return {
            "message": settings.PROJECT_NAME,
            "version": "1.0.0",
            "status": "healthy"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload during development
        log_level="info"
    )
