"""Summaries of a single in-game day, built from the player journal."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from masks.api.models import OwnedMask


@dataclass(frozen=True, slots=True)
class RelationshipChange:
    npc_id: str
    change: int


@dataclass(frozen=True, slots=True)
class MaskSummary:
    mask_id: str
    corruption_gained: int
    total_corruption: int


@dataclass(frozen=True, slots=True)
class DayRecap:
    day: int
    energy_spent: int
    reputation_change: int
    actions_completed: int
    events_encountered: int
    classes_attended: int
    items_used: int
    relationship_changes: list[RelationshipChange]
    masks: list[MaskSummary]


def build_day_recap(
    *,
    day: int,
    entries: Iterable[Mapping[str, str]],
    owned_masks: Mapping[str, OwnedMask] | None = None,
) -> DayRecap:
    energy_spent = 0
    reputation = 0
    sources = {"action": 0, "event": 0, "minigame": 0, "item": 0}
    relationships: dict[str, int] = {}
    corruption_gained: dict[str, int] = {}
    last_corruption: dict[str, int] = {}

    for e in entries:
        if e.get("day") != str(day):
            continue

        kind = e.get("type")
        if kind == "resolution":
            source = e.get("source", "")
            if source in sources:
                sources[source] += 1
        elif kind == "energy_changed":
            delta = int(e["delta"])
            if delta < 0:
                energy_spent -= delta
        elif kind == "reputation_changed":
            reputation += int(e["delta"])
        elif kind == "relationship_upserted":
            npc_id = e["npc_id"]
            relationships[npc_id] = relationships.get(npc_id, 0) + int(e["delta"])
        elif kind == "corruption_changed":
            mask_id = e["mask_id"]
            current = int(e["current"])
            corruption_gained[mask_id] = corruption_gained.get(mask_id, 0) + current - int(e["previous"])
            last_corruption[mask_id] = current

    masks: list[MaskSummary] = []
    for mask_id, gained in sorted(corruption_gained.items()):
        total = last_corruption[mask_id]
        if owned_masks is not None and mask_id in owned_masks:
            total = owned_masks[mask_id].corruption
        masks.append(MaskSummary(mask_id=mask_id, corruption_gained=gained, total_corruption=total))

    return DayRecap(
        day=day,
        energy_spent=energy_spent,
        reputation_change=reputation,
        actions_completed=sources["action"],
        events_encountered=sources["event"],
        classes_attended=sources["minigame"],
        items_used=sources["item"],
        relationship_changes=[RelationshipChange(npc_id=k, change=v) for k, v in sorted(relationships.items()) if v != 0],
        masks=masks,
    )
