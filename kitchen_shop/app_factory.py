"""
Application factory for the Kitchen Shop API.

Builds the FastAPI app: request IDs, CORS, rate limiting, routers under
/api/v1 and at the root, the health check, and table creation on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import CORS_ORIGINS, is_payment_configured
from .db import init_db
from .middleware import RequestIDMiddleware
from .routes import (
    cart_router,
    contact_router,
    currency_router,
    limiter,
    orders_router,
    tax_router,
)
from .services.cart_sessions import get_cache_stats

logger = logging.getLogger(__name__)

ROUTERS = (cart_router, orders_router, currency_router, tax_router, contact_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """
    Create the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Kitchen Shop API",
        description="Cart pricing, checkout and payments for the Kitchen OS shop",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    # CORS_ORIGINS defaults to ["*"], which cannot be combined with credentials
    allow_credentials = CORS_ORIGINS != ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Include routers with API version prefix
    api_v1 = APIRouter(prefix="/api/v1")
    for router in ROUTERS:
        api_v1.include_router(router)
    app.include_router(api_v1)

    # Also mount at root for backward compatibility
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "payments_configured": is_payment_configured(),
            "cart_sessions": get_cache_stats()["size"],
        }

    logger.info("Application created (CORS origins: %s)", CORS_ORIGINS)

    return app
