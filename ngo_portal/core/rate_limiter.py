"""
Login Rate Limiter
------------------
Fixed-window attempt counter kept in Redis, keyed by client address and email.

Disabled by default. When ``settings.rate_limit_enabled`` is false, or Redis
is unreachable, every attempt is allowed so that a cache outage never locks
people out of the site.
"""

from typing import Optional

from loguru import logger

from ngo_portal.core.config_manager import settings
from ngo_portal.core.exceptions import RateLimitedError
from ngo_portal.core.logger_setup import security_logger
from ngo_portal.core.redis_connection import RedisManager, redis_manager


class LoginRateLimiter:
    """Counts login attempts per window with INCR + EXPIRE."""

    KEY_PREFIX = "ngo_portal:login_attempts"

    def __init__(
        self,
        redis: Optional[RedisManager] = None,
        max_attempts: Optional[int] = None,
        window_seconds: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        self.redis = redis or redis_manager
        self.max_attempts = max_attempts or settings.login_rate_limit_attempts
        self.window_seconds = window_seconds or settings.login_rate_limit_window_seconds
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled

    def _key(self, client_ip: str, email: str) -> str:
        return f"{self.KEY_PREFIX}:{client_ip}:{email.strip().lower()}"

    async def hit(self, client_ip: str, email: str) -> int:
        """
        Register one attempt and return the count inside the current window.

        Raises:
            RateLimitedError: When the attempt exceeds the allowed count
        """
        if not self.enabled or not self.redis.is_initialized:
            return 0

        key = self._key(client_ip, email)
        try:
            attempts = await self.redis.client.incr(key)
            if attempts == 1:
                await self.redis.client.expire(key, self.window_seconds)
        except Exception as e:
            logger.warning(f"Rate limiter unavailable, allowing attempt: {e}")
            return 0

        if attempts > self.max_attempts:
            security_logger.warning(f"Login rate limit exceeded for {email} from {client_ip}")
            raise RateLimitedError(
                "Too many login attempts. Please try again later.",
                details={"retry_after_seconds": self.window_seconds},
            )
        return attempts

    async def reset(self, client_ip: str, email: str) -> None:
        """Forget the attempts after a successful login."""
        if not self.enabled or not self.redis.is_initialized:
            return
        try:
            await self.redis.client.delete(self._key(client_ip, email))
        except Exception as e:
            logger.warning(f"Could not reset login attempts: {e}")
