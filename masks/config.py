from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True, slots=True)
class GameSettings:
    redis_url: str
    strict_content: bool
    lock_ttl_ms: int
    start_time: str
    start_energy: int


def settings_from_env() -> GameSettings:
    return GameSettings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        # Fall back to the built-in dataset unless strict loading is requested.
        strict_content=_env_flag("MASKS_STRICT_CONTENT"),
        lock_ttl_ms=int(os.environ.get("MASKS_LOCK_TTL_MS", "5000")),
        start_time=os.environ.get("MASKS_START_TIME", "08:00"),
        start_energy=int(os.environ.get("MASKS_START_ENERGY", "100")),
    )
