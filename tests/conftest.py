from __future__ import annotations

import os
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import fakeredis
import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI, we *don't* auto-load `.env` so settings like REDIS_URL can't leak in.
    """

    if os.environ.get("CI"):
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(scope="session", autouse=True)
def _init_content_from_test_fixtures() -> None:
    """Initialize content from `tests/data` and forbid the built-in fallback.

    This keeps tests hermetic and independent of the repo's real story content.
    """

    os.environ["MASKS_STRICT_CONTENT"] = "1"

    from masks.content.singleton import init_content, reset_content_for_tests

    reset_content_for_tests()
    init_content(project_root=Path(__file__).resolve().parent)


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to an in-memory fakeredis."""

    from fastapi.testclient import TestClient

    from masks.api.deps import get_redis
    from masks.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


def _build_player(**overrides):
    from masks.api.models import PlayerState, SessionPhase

    now = datetime(2025, 1, 1, tzinfo=UTC)
    data = {
        "player_id": "p1",
        "username": "tester",
        "created_at": now,
        "last_updated_at": now,
        "phase": SessionPhase.exploring,
    }
    data.update(overrides)
    return PlayerState.model_validate(data)


@pytest.fixture()
def make_player():
    """Factory for PlayerState snapshots that never touch Redis."""

    return _build_player
