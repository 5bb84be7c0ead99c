from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class EffectBundle(BaseModel):
    """Potential state deltas attached to an action, event choice, item or minigame."""

    time: int | None = Field(None, ge=0)
    reputation: int | None = None
    energy: int | None = None
    corruption: int | None = None
    relationships: dict[str, int] = Field(default_factory=dict)
    items: dict[str, int] = Field(default_factory=dict)
    mood: str | None = None


class MaskModifier(BaseModel):
    """Addends applied on top of a bundle while the keyed mask is equipped."""

    reputation_bonus: int = 0
    relationship_bonus: int = 0
    bonus_score: int = 0


class MaskAbilities(BaseModel):
    hint: bool = False
    danger_sense: bool = False
    illusion: bool = False
    empathy: bool = False


class BonusStats(BaseModel):
    charm: int = 0
    insight: int = 0
    chaos: int = 0


class DailyEffects(BaseModel):
    dialogue_color: str = "#ffffff"
    overlay: str = ""
    bonus_stats: BonusStats = Field(default_factory=BonusStats)


class MaskDefinition(BaseModel):
    id: str
    name: str
    alias: str = ""
    description: str = ""
    symbol: str = "\U0001f3ad"
    abilities: MaskAbilities = Field(default_factory=MaskAbilities)
    daily_effects: DailyEffects = Field(default_factory=DailyEffects)
    corruption_triggers: list[str] = Field(default_factory=list)
    unlock_requirements: list[str] = Field(default_factory=list)


class ActionPreconditions(BaseModel):
    # Mask ids allowed to perform the action; [] or ["any"] means unrestricted.
    masks: list[str] = Field(default_factory=list)
    # Item ids that must all be held.
    inventory: list[str] = Field(default_factory=list)


class ActionDefinition(BaseModel):
    id: str
    name: str
    zone_id: str | None = None
    preconditions: ActionPreconditions = Field(default_factory=ActionPreconditions)
    time_cost: int = Field(0, ge=0)
    effects: EffectBundle = Field(default_factory=EffectBundle)
    risk_level: Literal["low", "medium", "high"] = "low"
    mask_modifiers: dict[str, MaskModifier] = Field(default_factory=dict)

    def bundle(self) -> EffectBundle:
        return self.effects.model_copy(update={"time": self.time_cost})


class EventChoice(BaseModel):
    id: str
    text: str
    effect: EffectBundle = Field(default_factory=EffectBundle)
    # A single awarded item, granted once.
    item: str | None = None

    def bundle(self) -> EffectBundle:
        if not self.item:
            return self.effect
        items = dict(self.effect.items)
        items[self.item] = items.get(self.item, 0) + 1
        return self.effect.model_copy(update={"items": items})


class EventDefinition(BaseModel):
    id: str
    name: str
    trigger_chance: float = Field(0, ge=0, le=100)
    trigger_zones: list[str] = Field(default_factory=list)
    choices: list[EventChoice] = Field(default_factory=list)
    mask_modifiers: dict[str, MaskModifier] = Field(default_factory=dict)

    def choice(self, choice_id: str) -> EventChoice | None:
        return next((c for c in self.choices if c.id == choice_id), None)


class ItemDefinition(BaseModel):
    id: str
    name: str
    type: Literal["consumable", "equipment", "quest"]
    description: str = ""
    effects: EffectBundle = Field(default_factory=EffectBundle)


class MinigameRewards(BaseModel):
    grade: int = 0
    insight: int = 0
    charm: int = 0
    chaos: int = 0


class MinigameDefinition(BaseModel):
    id: str
    class_id: str
    name: str
    description: str = ""
    difficulty: int = Field(..., ge=0)
    mask_modifiers: dict[str, MaskModifier] = Field(default_factory=dict)
    rewards: MinigameRewards = Field(default_factory=MinigameRewards)

    @property
    def pass_score(self) -> int:
        return self.difficulty * 10


class NpcScheduleSlot(BaseModel):
    time: str
    zone_id: str


class NpcDefinition(BaseModel):
    id: str
    name: str
    role: Literal["Student", "Teacher", "Director"]
    traits: list[str] = Field(default_factory=list)
    personality: str = ""
    schedule: list[NpcScheduleSlot] = Field(default_factory=list)
    # Starting affinity before the player has any relationship row.
    relationship: int = 0
    rumor_score: int = 0
    reactions: dict[str, str] = Field(default_factory=dict)
    events: list[str] = Field(default_factory=list)


class ZoneDefinition(BaseModel):
    id: str
    name: str
    type: Literal["class", "hallway", "special"]
    description: str | None = None
