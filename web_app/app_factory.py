"""FastAPI application factory."""

from fastapi import FastAPI

from .api import api_router
from .errors import register_error_handlers
from .middleware.logging import LoggingMiddleware
from .web import web_router


def create_app(
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service_instance: URLShortenerService instance (may be set later by the lifespan)
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Short Links",
        description="Short-link resolution service",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.service = service_instance
    app.state.config = config

    app.add_middleware(LoggingMiddleware)
    register_error_handlers(app)

    # API first so /api/... never matches the /{short_code} redirect
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
