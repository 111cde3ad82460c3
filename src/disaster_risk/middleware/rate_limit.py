"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from disaster_risk.config import RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
from disaster_risk.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with HTTP 429 once the global limit is exceeded."""

    BYPASS_PATHS = {
        "/risk/health",
        "/risk/info",
        "/api",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }

    def __init__(
        self,
        app,
        calls: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled: bool = RATE_LIMIT_ENABLED,
        rate_limiter: Optional[RateLimiter] = None
    ):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            calls: Maximum requests per second
            enabled: Whether limiting is applied at all
            rate_limiter: Limiter instance (creates a Redis-backed one if None)
        """
        super().__init__(app)
        self.enabled = enabled
        self.rate_limiter = rate_limiter or RateLimiter(max_requests=calls)
        logger.info(f"Rate limit enabled: {self.enabled}, limit: {calls} req/sec")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Apply the global rate limit to a request.

        Args:
            request: Incoming request
            call_next: Next handler in the chain

        Returns:
            429 response if the limit is exceeded, otherwise the handler's response
            with X-RateLimit headers
        """
        if not self.enabled or request.url.path in self.BYPASS_PATHS:
            return await call_next(request)

        is_allowed, retry_after = await self.rate_limiter.is_allowed()

        if not is_allowed:
            request_host = request.client.host if request.client else "unknown"
            logger.warning(f"Rate limit exceeded for {request_host} accessing {request.method} {request.url.path}")

            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = f"{self.rate_limiter.window_size:g}"
        return response
