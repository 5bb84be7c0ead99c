from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import cast

import redis


@dataclass(frozen=True, slots=True)
class Journal:
    """Per-player Redis stream of resolution and mutation records."""

    player_id: str

    @property
    def key(self) -> str:
        return f"journal:{self.player_id}"


def append_to_journal(*, r: redis.Redis, journal: Journal, entries: Sequence[Mapping[str, str]]) -> list[str]:
    ids: list[str] = []
    for fields in entries:
        # redis-py stubs expect field/value unions; journal fields are always strings.
        stream_id = r.xadd(journal.key, {str(k): str(v) for k, v in fields.items()})
        ids.append(cast(str, stream_id))
    return ids


def read_journal(*, r: redis.Redis, journal: Journal, count: int | None = None) -> list[dict[str, str]]:
    entries = r.xrange(journal.key, min="-", max="+", count=count)
    return [dict(fields) for _, fields in entries]


def delete_journal(*, r: redis.Redis, journal: Journal) -> None:
    r.delete(journal.key)
