"""Redis connection and per-user rate limiting."""

import redis

from ecofinds.config import RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW, REDIS_CONFIG


class RedisClient:
    def __init__(self):
        self.client = redis.Redis(**REDIS_CONFIG)

    def ping(self) -> bool:
        return self.client.ping()

    def rate_limit_check(self, user_id: str, endpoint: str) -> bool:
        """Count a request in the user's current window. Returns True if allowed, False if rate limit exceeded."""
        key = f"rate_limit:{user_id}:{endpoint}"
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        # -1: key has no expiry yet, so this request opened the window
        if ttl == -1:
            self.client.expire(key, RATE_LIMIT_WINDOW)
        return count <= RATE_LIMIT_REQUESTS


# Singleton instance
redis_client = RedisClient()
