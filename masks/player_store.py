from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import redis

from masks.api.models import PlayerState
from masks.config import settings_from_env
from masks.core.clock import parse_time
from masks.errors import NotFoundError
from masks.streams import Journal, delete_journal


PLAYERS_SET_KEY = "masks:players"
PLAYER_KEY_PREFIX = "masks:player:"  # + {player_id}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _player_key(player_id: str) -> str:
    return f"{PLAYER_KEY_PREFIX}{player_id}"


def save_player(*, r: redis.Redis, player: PlayerState) -> None:
    # One SET per snapshot: readers never observe a partially applied resolution.
    player.last_updated_at = _now()
    r.set(_player_key(player.player_id), player.model_dump_json())


def get_player(*, r: redis.Redis, player_id: str) -> PlayerState | None:
    raw = r.get(_player_key(player_id))
    if not raw:
        return None
    return PlayerState.model_validate_json(raw)


def require_player(*, r: redis.Redis, player_id: str) -> PlayerState:
    player = get_player(r=r, player_id=player_id)
    if player is None:
        raise NotFoundError("Player not found")
    return player


def create_player(*, r: redis.Redis, username: str, grade: int = 10) -> PlayerState:
    settings = settings_from_env()
    # Reject a bad configured start time up front rather than on the first action.
    parse_time(settings.start_time)

    now = _now()
    player = PlayerState(
        player_id=uuid4().hex,
        username=username,
        grade=grade,
        created_at=now,
        last_updated_at=now,
        energy=settings.start_energy,
        time=settings.start_time,
    )
    r.set(_player_key(player.player_id), player.model_dump_json())
    r.sadd(PLAYERS_SET_KEY, player.player_id)
    return player


def list_players(*, r: redis.Redis) -> list[PlayerState]:
    out: list[PlayerState] = []
    for pid in sorted(r.smembers(PLAYERS_SET_KEY)):
        player = get_player(r=r, player_id=pid)
        if player is not None:
            out.append(player)
    out.sort(key=lambda p: p.created_at, reverse=True)
    return out


def delete_player(*, r: redis.Redis, player_id: str) -> None:
    """Reset: drop the snapshot, its index entry and its journal."""

    require_player(r=r, player_id=player_id)
    r.delete(_player_key(player_id))
    r.srem(PLAYERS_SET_KEY, player_id)
    delete_journal(r=r, journal=Journal(player_id=player_id))
