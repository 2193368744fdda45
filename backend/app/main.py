"""SNIC API Backend - FastAPI Application Factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.api.health import router as health_router
from app.core import async_session_maker, settings, setup_logging
from app.core.logging import get_logger
from app.middleware import RevokedTokenMiddleware, SecurityHeadersMiddleware

# Import all models to ensure they're registered with Base for Alembic
from app.models import (  # noqa: F401
    BlacklistedToken,
    Feature,
    Policy,
    Product,
    User,
)
from app.services.token_cleanup import TokenCleanupService
from app.services.tokens import TokenConfig, TokenIssuer

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    setup_logging(
        level=settings.log_level,
        format_type="dev" if settings.debug else "structured",
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    for warning in settings.check_security_configuration():
        logger.warning(f"Security configuration: {warning}")

    cleanup = TokenCleanupService(
        async_session_maker,
        interval_seconds=settings.token_cleanup_interval_seconds,
    )
    app.state.token_cleanup = cleanup
    await cleanup.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await cleanup.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Raises ConfigurationError when no JWT signing key is configured.
    """
    token_config = TokenConfig.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Insurance products and policies API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.token_issuer = TokenIssuer(token_config)

    # Revoked tokens are rejected before any route runs
    app.add_middleware(RevokedTokenMiddleware, session_factory=async_session_maker)

    # Security headers middleware
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - MUST be outermost (added last in Starlette LIFO order)
    # so that CORS headers are present on ALL responses, including 401 from the gate.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
    )

    # Prometheus metrics (before routers so /metrics endpoint is registered first)
    if settings.enable_metrics:
        from prometheus_fastapi_instrumentator import Instrumentator

        Instrumentator(
            excluded_handlers=["/health", "/metrics"],
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    # Include routers
    app.include_router(health_router)  # Health at root level
    app.include_router(api_router)  # API at /api

    # Root endpoint
    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
        }

    return app


# Application instance
app = create_app()
