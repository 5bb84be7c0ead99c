from __future__ import annotations

import redis

from masks.config import settings_from_env


def create_redis(url: str | None = None) -> redis.Redis:
    """Client for `url` (default: REDIS_URL) that reads and writes str, not bytes."""

    return redis.Redis.from_url(url or settings_from_env().redis_url, decode_responses=True)
