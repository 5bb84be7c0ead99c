from __future__ import annotations

from contextlib import contextmanager

import redis

from masks.config import settings_from_env
from masks.errors import PlayerBusyError


@contextmanager
def player_lock(*, r: redis.Redis, player_id: str, ttl_ms: int | None = None):
    """Best-effort per-player lock around a read-resolve-write cycle.

    There is no retry: a second request for the same player while the first
    holds the lock fails immediately with PlayerBusyError.
    """

    if ttl_ms is None:
        ttl_ms = settings_from_env().lock_ttl_ms

    key = f"lock:player:{player_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise PlayerBusyError("Player is busy")
    try:
        yield
    finally:
        r.delete(key)
