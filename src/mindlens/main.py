"""
MindLens FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (collaborators, database, pipeline)
- Logging, Sentry and Prometheus setup
- CORS and error handling middleware
- Router registration
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindlens import __version__
from mindlens.api.middleware.error_handler import ErrorHandlerMiddleware
from mindlens.api.v1.router import api_router
from mindlens.config import Settings, get_settings
from mindlens.config.logging_config import configure_logging, get_logger
from mindlens.infrastructure.collaborator_factory import create_collaborators
from mindlens.infrastructure.metrics import metrics_router, update_system_info
from mindlens.infrastructure.monitoring import init_sentry

logger = get_logger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to environment settings

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting MindLens application", env=settings.env, version=__version__)

        init_sentry(
            settings.sentry_dsn.get_secret_value() if settings.sentry_dsn else None,
            environment=settings.env,
            release=f"mindlens@{__version__}",
        )
        update_system_info(settings.env, __version__)

        collaborators = await create_collaborators(settings)
        app.state.collaborators = collaborators
        app.state.pipeline = collaborators.build_pipeline(settings)

        try:
            yield
        finally:
            logger.info("Shutting down MindLens application")
            await app.state.pipeline.drain()
            await collaborators.close()
            logger.info("MindLens application shutdown complete")

    app = FastAPI(
        title="MindLens API",
        description="PHQ-9 risk assessment, crisis response and encrypted submission",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(api_router, prefix=f"/api/{settings.api_version}")
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "MindLens API",
            "version": __version__,
            "status": "operational",
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "mindlens.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
