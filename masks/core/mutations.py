"""Records of every state change made while resolving an effect bundle.

The resolver returns these in order so callers can persist them, publish
them to the player journal, and summarise a day for the recap screen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class Mutation:
    kind: ClassVar[str] = "mutation"

    def as_fields(self) -> dict[str, str]:
        fields = {"type": self.kind}
        for k, v in asdict(self).items():
            fields[k] = "" if v is None else str(v)
        return fields


@dataclass(frozen=True, slots=True)
class TimeAdvanced(Mutation):
    kind: ClassVar[str] = "time_advanced"

    previous: str
    current: str
    minutes: int
    wrapped_days: int


@dataclass(frozen=True, slots=True)
class ReputationChanged(Mutation):
    kind: ClassVar[str] = "reputation_changed"

    delta: int
    current: int


@dataclass(frozen=True, slots=True)
class EnergyChanged(Mutation):
    kind: ClassVar[str] = "energy_changed"

    delta: int
    current: int


@dataclass(frozen=True, slots=True)
class CorruptionChanged(Mutation):
    kind: ClassVar[str] = "corruption_changed"

    mask_id: str
    previous: int
    current: int

    @property
    def delta(self) -> int:
        return self.current - self.previous


@dataclass(frozen=True, slots=True)
class RelationshipUpserted(Mutation):
    kind: ClassVar[str] = "relationship_upserted"

    npc_id: str
    delta: int
    current: int
    created: bool


@dataclass(frozen=True, slots=True)
class InventoryUpserted(Mutation):
    kind: ClassVar[str] = "inventory_upserted"

    item_id: str
    delta: int
    quantity: int
    created: bool


@dataclass(frozen=True, slots=True)
class InventoryRemoved(Mutation):
    kind: ClassVar[str] = "inventory_removed"

    item_id: str
    previous: int


@dataclass(frozen=True, slots=True)
class MoodChanged(Mutation):
    kind: ClassVar[str] = "mood_changed"

    previous: str
    current: str


@dataclass(frozen=True, slots=True)
class EventCompleted(Mutation):
    kind: ClassVar[str] = "event_completed"

    event_id: str
    choice_id: str


@dataclass(frozen=True, slots=True)
class MinigameRecorded(Mutation):
    kind: ClassVar[str] = "minigame_recorded"

    minigame_id: str
    score: int
    completed: bool
