"""Sliding window rate limiter backed by Redis."""

import logging
import time
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from disaster_risk.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Global requests-per-window limiter using a Redis sorted set.

    Every assessment fans out to four public APIs, so the limiter guards
    their usage policies as much as this service. Requests are allowed
    when Redis is unreachable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        window_size: float = 1.0
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per window
            window_size: Window length in seconds
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_size = window_size
        self.sorted_set_key = f"{RATE_LIMIT_REDIS_KEY_PREFIX}:global"

    async def is_allowed(self) -> tuple[bool, int]:
        """Check if a request is allowed under the rate limit.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        try:
            current_time = time.time()
            # Scores in microseconds
            current_timestamp = int(current_time * 1_000_000)
            window_start = (current_time - self.window_size) * 1_000_000

            pipe = self.redis_client.pipeline()
            pipe.zadd(self.sorted_set_key, {str(current_timestamp): current_timestamp})
            pipe.zremrangebyscore(self.sorted_set_key, 0, window_start)
            pipe.zcard(self.sorted_set_key)
            pipe.expire(self.sorted_set_key, max(1, int(self.window_size * 2)))

            _, _, request_count, _ = await pipe.execute()

            if request_count > self.max_requests:
                retry_after = max(1, int(self.window_size * 2))
                logger.debug(f"Rate limited: count={request_count}, max={self.max_requests}")
                return False, retry_after

            return True, 0

        except RedisError as e:
            logger.error(f"Rate limiter unavailable, allowing request: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
