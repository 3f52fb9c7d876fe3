"""
FastAPI Application Factory

Creates and configures the analytics API application.
"""

from typing import Any, Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from storefront_analytics.config import get_settings
from storefront_analytics.serving.api.errors import register_exception_handlers
from storefront_analytics.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from storefront_analytics.serving.api.routes import analytics_router, health_router
from storefront_analytics.serving.cache import ResultCache

settings = get_settings()


def create_api_app(
    lifespan: Optional[Callable[[FastAPI], Any]] = None,
    cache: Optional[ResultCache] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown handler
        cache: Result cache shared by all requests; a fresh one by default

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Storefront Analytics API",
        description="KPI, trend, ranking, inventory, cohort and segmentation analytics",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.state.result_cache = cache or ResultCache(
        ttl_seconds=settings.analytics.cache_ttl_seconds,
        max_entries=settings.analytics.cache_max_entries,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])

    return app
