"""Main FastAPI application for the disaster risk service."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncGenerator

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend

from disaster_risk.api.endpoints import router as risk_router, get_dashboard_controller, get_risk_service
from disaster_risk.config import (
    HOST, PORT, DEBUG, REDIS_URL, CACHE_PREFIX, REFRESH_INTERVAL_SECONDS,
    RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
)
from disaster_risk.logging_config import configure_logging
from disaster_risk.middleware.rate_limit import RateLimitMiddleware

configure_logging(logging.DEBUG if DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(f"Connecting to Redis at {REDIS_URL}")
    redis_client = redis.from_url(REDIS_URL)
    FastAPICache.init(RedisBackend(redis_client), prefix=CACHE_PREFIX)
    logger.info("Cache initialized with Redis backend")

    # Builds the services now so timezone data loads before the first request
    controller = get_dashboard_controller()
    refresh_task = asyncio.create_task(controller.run_periodic_refresh(load_first=True))
    logger.info(f"Dashboard refresh every {REFRESH_INTERVAL_SECONDS}s for {controller.state.location.name}")

    logger.info("Starting Disaster Risk Service")
    try:
        yield
    finally:
        logger.info("Shutting down Disaster Risk Service")
        refresh_task.cancel()
        with suppress(asyncio.CancelledError):
            await refresh_task
        await get_risk_service().aclose()
        await redis_client.aclose()


def create_app(rate_limit_enabled: bool = RATE_LIMIT_ENABLED) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        rate_limit_enabled: Whether to enforce the global rate limit

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Disaster Risk Service",
        description="Heuristic disaster risk scores from live weather, seismic and alert feeds",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        calls=RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled=rate_limit_enabled
    )

    app.include_router(risk_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint."""
        return {
            "message": "Disaster Risk Service",
            "docs": "/docs",
            "redoc": "/redoc",
            "risk": "/risk",
            "search": "/risk/search",
            "dashboard": "/risk/dashboard",
            "health": "/risk/health"
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "disaster_risk.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info"
    )


if __name__ == "__main__":
    main()
