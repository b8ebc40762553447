# SPDX-License-Identifier: Apache-2.0

"""
Redis service for the JWT token blocklist.

Logged-out and deleted-account tokens are stored until they would have
expired, so the auth middleware can reject them.
"""

import os
from typing import Any, Dict, Optional
import redis
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

BLOCKLIST_PREFIX = "blocklist:"


class RedisConnectionError(Exception):
    """Raised when Redis connection fails."""
    pass


class RedisService:
    """
    Redis service with the standard redis-py client.

    A pre-built client (e.g. ``fakeredis.FakeRedis``) may be injected.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize the Redis service.

        Args:
            redis_url: Redis connection URL (redis://host:port)
            client: Optional pre-built client
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")

        if client is not None:
            self.client = client
            return

        try:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
            self._test_connection()
            logger.info(f"Redis service initialized successfully at {self.redis_url}")

        except Exception as e:
            logger.error(f"Failed to initialize Redis service: {str(e)}")
            self.client = None

    def _test_connection(self) -> None:
        """Test Redis connection."""
        try:
            result = self.client.ping()
            if not result:
                raise RedisConnectionError("Redis ping failed")
        except redis.RedisError as e:
            logger.error(f"Redis connection test failed: {str(e)}")
            raise RedisConnectionError(f"Redis connection failed: {str(e)}")

    def is_available(self) -> bool:
        """Check if Redis service is available."""
        return self.client is not None

    def is_token_blocked(self, token_id: str) -> bool:
        """
        Check whether a token id is in the blocklist.

        Raises:
            RedisConnectionError: If Redis is unavailable
        """
        with tracer.start_as_current_span("redis.is_token_blocked"):
            if not self.is_available():
                raise RedisConnectionError("Redis client not initialized")
            try:
                return bool(self.client.exists(f"{BLOCKLIST_PREFIX}{token_id}"))
            except redis.RedisError as e:
                raise RedisConnectionError(f"Blocklist lookup failed: {str(e)}")

    def block_token(self, token_id: str, ttl_seconds: int) -> bool:
        """
        Add a token id to the blocklist until it expires.

        Args:
            token_id: Unique token identifier (jti)
            ttl_seconds: Remaining lifetime of the token

        Returns:
            True if the token was stored
        """
        with tracer.start_as_current_span("redis.block_token") as span:
            span.set_attribute("redis.ttl_seconds", ttl_seconds)
            if not self.is_available():
                logger.error("Cannot block token: Redis unavailable")
                return False
            try:
                self.client.set(f"{BLOCKLIST_PREFIX}{token_id}", "1", ex=max(1, int(ttl_seconds)))
                logger.info("Token added to blocklist", extra={"token_id": token_id})
                return True
            except redis.RedisError as e:
                logger.error(f"Failed to block token: {str(e)}")
                return False

    def health_check(self) -> Dict[str, Any]:
        """Check Redis connection health."""
        if not self.is_available():
            return {'status': 'unhealthy', 'error': 'client not initialized'}
        try:
            return {'status': 'healthy', 'ping': bool(self.client.ping())}
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return {'status': 'unhealthy', 'error': str(e)}
