from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from masks.config import settings_from_env
from masks.content.models import (
    ActionDefinition,
    EffectBundle,
    EventChoice,
    EventDefinition,
    ItemDefinition,
    MaskAbilities,
    MaskDefinition,
    MaskModifier,
    MinigameDefinition,
    MinigameRewards,
    NpcDefinition,
    NpcScheduleSlot,
    ZoneDefinition,
)
from masks.core.clock import parse_time
from masks.errors import ContentLoadError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class GameContent:
    """Immutable content tables keyed by id."""

    masks: dict[str, MaskDefinition]
    actions: dict[str, ActionDefinition]
    events: dict[str, EventDefinition]
    items: dict[str, ItemDefinition]
    minigames: dict[str, MinigameDefinition]
    npcs: dict[str, NpcDefinition]
    zones: dict[str, ZoneDefinition]

    def actions_in_zone(self, zone_id: str) -> list[ActionDefinition]:
        return [a for a in self.actions.values() if a.zone_id in (zone_id, None)]

    def events_in_zone(self, zone_id: str) -> list[EventDefinition]:
        return [e for e in self.events.values() if zone_id in e.trigger_zones]

    def npcs_at(self, *, time: str, zone_id: str | None = None) -> list[NpcDefinition]:
        out: list[NpcDefinition] = []
        for npc in self.npcs.values():
            if any(s.time == time and (zone_id is None or s.zone_id == zone_id) for s in npc.schedule):
                out.append(npc)
        return out

    def starting_masks(self) -> list[MaskDefinition]:
        return [m for m in self.masks.values() if not m.unlock_requirements]


def _index(rows: list[M], *, label: str) -> dict[str, M]:
    out: dict[str, M] = {}
    for row in rows:
        row_id = getattr(row, "id")
        if row_id in out:
            raise ContentLoadError(f"Duplicate {label} id: {row_id}")
        out[row_id] = row
    return dict(sorted(out.items()))


def _read_json_rows(path: Path, model: type[M]) -> list[M]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ContentLoadError(f"Content file not found: {path}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ContentLoadError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise ContentLoadError(f"Expected a list of records in {path}")

    try:
        return [model.model_validate(row) for row in data]
    except ValidationError as e:
        raise ContentLoadError(f"Invalid record in {path}: {e}") from e


def _check_references(content: GameContent) -> None:
    for npc in content.npcs.values():
        for slot in npc.schedule:
            try:
                parse_time(slot.time)
            except ValueError as e:
                raise ContentLoadError(f"NPC {npc.id} has a bad schedule time: {slot.time}") from e
    for action in content.actions.values():
        if action.zone_id is not None and action.zone_id not in content.zones:
            raise ContentLoadError(f"Action {action.id} references unknown zone: {action.zone_id}")
    for event in content.events.values():
        if not event.choices:
            raise ContentLoadError(f"Event {event.id} has no choices")


def build_content(
    *,
    masks: list[MaskDefinition],
    actions: list[ActionDefinition],
    events: list[EventDefinition],
    items: list[ItemDefinition],
    minigames: list[MinigameDefinition],
    npcs: list[NpcDefinition],
    zones: list[ZoneDefinition],
) -> GameContent:
    content = GameContent(
        masks=_index(masks, label="mask"),
        actions=_index(actions, label="action"),
        events=_index(events, label="event"),
        items=_index(items, label="item"),
        minigames=_index(minigames, label="minigame"),
        npcs=_index(npcs, label="npc"),
        zones=_index(zones, label="zone"),
    )
    _check_references(content)
    return content


def _fallback_game_content() -> GameContent:
    """Small built-in dataset used when the JSON content files are missing."""

    return build_content(
        masks=[
            MaskDefinition(
                id="mask_calm",
                name="Calm",
                alias="The Listener",
                abilities=MaskAbilities(empathy=True),
                corruption_triggers=["lie"],
            ),
            MaskDefinition(
                id="mask_charm",
                name="Charm",
                alias="The Smile",
                abilities=MaskAbilities(illusion=True),
                corruption_triggers=["manipulate", "flirt"],
            ),
            MaskDefinition(
                id="mask_void",
                name="Void",
                alias="The Nobody",
                abilities=MaskAbilities(danger_sense=True, hint=True),
                unlock_requirements=["corruption_50_all_masks", "experience_loss_event"],
            ),
        ],
        actions=[
            ActionDefinition(
                id="study_library",
                name="Study in the library",
                zone_id="library",
                time_cost=60,
                effects=EffectBundle(energy=-10, reputation=1),
            ),
            ActionDefinition(
                id="chat_classmate",
                name="Chat with a classmate",
                zone_id="hallway",
                time_cost=15,
                effects=EffectBundle(relationships={"npc_aiko": 5}),
                mask_modifiers={"mask_charm": MaskModifier(reputation_bonus=2, relationship_bonus=3)},
            ),
        ],
        events=[
            EventDefinition(
                id="hallway_rumor",
                name="A rumor in the hallway",
                trigger_chance=40,
                trigger_zones=["hallway"],
                choices=[
                    EventChoice(id="spread", text="Spread it", effect=EffectBundle(time=10, corruption=5)),
                    EventChoice(id="ignore", text="Walk away", effect=EffectBundle(time=5)),
                ],
            ),
        ],
        items=[
            ItemDefinition(id="energy_drink", name="Energy Drink", type="consumable", effects=EffectBundle(energy=20)),
            ItemDefinition(id="library_card", name="Library Card", type="quest"),
        ],
        minigames=[
            MinigameDefinition(
                id="math_quiz",
                class_id="math",
                name="Math Quiz",
                difficulty=3,
                rewards=MinigameRewards(grade=1, insight=2),
            ),
        ],
        npcs=[
            NpcDefinition(
                id="npc_aiko",
                name="Aiko",
                role="Student",
                schedule=[NpcScheduleSlot(time="08:00", zone_id="hallway")],
                reactions={"mask_charm": "Aiko blushes."},
            ),
        ],
        zones=[
            ZoneDefinition(id="hallway", name="Main Hallway", type="hallway"),
            ZoneDefinition(id="library", name="Library", type="special"),
        ],
    )


def load_game_content(*, root: Path) -> GameContent:
    data_dir = root / "data"
    strict = settings_from_env().strict_content

    try:
        return build_content(
            masks=_read_json_rows(data_dir / "masks.json", MaskDefinition),
            actions=_read_json_rows(data_dir / "actions.json", ActionDefinition),
            events=_read_json_rows(data_dir / "events.json", EventDefinition),
            items=_read_json_rows(data_dir / "items.json", ItemDefinition),
            minigames=_read_json_rows(data_dir / "minigames.json", MinigameDefinition),
            npcs=_read_json_rows(data_dir / "npcs.json", NpcDefinition),
            zones=_read_json_rows(data_dir / "zones.json", ZoneDefinition),
        )
    except ContentLoadError:
        if strict:
            raise
        logger.warning("content files under %s unusable; using built-in fallback content", data_dir, exc_info=True)
        return _fallback_game_content()
