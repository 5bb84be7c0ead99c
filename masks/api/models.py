from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class SessionPhase(StrEnum):
    mask_selection = "mask_selection"
    exploring = "exploring"
    day_recap = "day_recap"


class OwnedMask(BaseModel):
    mask_id: str
    corruption: int = Field(0, ge=0, le=100)


class MinigameProgress(BaseModel):
    score: int = 0
    completed: bool = False


class PlayerStats(BaseModel):
    charm: int = 0
    insight: int = 0
    chaos: int = 0


class PlayerState(BaseModel):
    player_id: str
    username: str
    created_at: datetime
    last_updated_at: datetime

    # Energy is not clamped when effects apply; see energy_display.
    energy: int = 100
    mood: str = "neutral"
    time: str = "08:00"
    day: int = 1
    reputation: int = 0
    grade: int = 10
    zone_id: str | None = None

    phase: SessionPhase = SessionPhase.mask_selection

    current_mask_id: str | None = None
    masks: dict[str, OwnedMask] = Field(default_factory=dict)

    # item_id -> quantity; entries are removed instead of reaching zero.
    inventory: dict[str, int] = Field(default_factory=dict)
    # npc_id -> affinity (unbounded, signed)
    relationships: dict[str, int] = Field(default_factory=dict)
    # event_id -> choice_id
    events_completed: dict[str, str] = Field(default_factory=dict)
    minigame_progress: dict[str, MinigameProgress] = Field(default_factory=dict)
    stats: PlayerStats = Field(default_factory=PlayerStats)

    @property
    def energy_display(self) -> int:
        return max(0, min(100, self.energy))

    @property
    def completed_classes(self) -> int:
        return sum(1 for p in self.minigame_progress.values() if p.completed)


class PlayerCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    grade: int = Field(10, ge=1, le=12)


class PlayerListResponse(BaseModel):
    players: list[PlayerState]


class MinigameSubmitRequest(BaseModel):
    score: int


class UnlockRequest(BaseModel):
    # Story requirements (e.g. "experience_conflict") the client reports as met.
    flags: list[str] = Field(default_factory=list)


class AppliedEffectsModel(BaseModel):
    time: int = 0
    reputation: int = 0
    energy: int = 0
    corruption: int = 0
    relationships: dict[str, int] = Field(default_factory=dict)
    items: dict[str, int] = Field(default_factory=dict)
    mood: str | None = None


class HandlerResponse(BaseModel):
    player: PlayerState
    applied: AppliedEffectsModel
    mutations: list[dict[str, str]] = Field(default_factory=list)
    outcome: dict[str, object] | None = None


class EquipResponse(BaseModel):
    player: PlayerState
    equipped: bool


class RelationshipChangeModel(BaseModel):
    npc_id: str
    change: int


class MaskSummaryModel(BaseModel):
    mask_id: str
    corruption_gained: int
    total_corruption: int


class DayRecapResponse(BaseModel):
    day: int
    energy_spent: int
    reputation_change: int
    actions_completed: int
    events_encountered: int
    classes_attended: int
    items_used: int
    relationship_changes: list[RelationshipChangeModel]
    masks: list[MaskSummaryModel]
