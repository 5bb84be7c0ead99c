"""Effect resolution: apply an effect bundle to a player snapshot.

`resolve_effects` is the one place where actions, event choices, item uses and
minigame results change player state. It never mutates its input: it works
on a deep copy and returns the new snapshot together with an ordered log of
every mutation it performed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from masks.api.models import PlayerState
from masks.content.models import EffectBundle, MaskModifier
from masks.core.clock import advance_clock
from masks.core.inventory import Inventory
from masks.core.mask_state import MaskLoadout
from masks.core.mutations import (
    CorruptionChanged,
    EnergyChanged,
    InventoryRemoved,
    MoodChanged,
    Mutation,
    RelationshipUpserted,
    ReputationChanged,
    TimeAdvanced,
)


@dataclass(slots=True)
class AppliedEffects:
    """Deltas actually applied, after mask modifiers."""

    time: int = 0
    reputation: int = 0
    energy: int = 0
    corruption: int = 0
    relationships: dict[str, int] = field(default_factory=dict)
    items: dict[str, int] = field(default_factory=dict)
    mood: str | None = None


@dataclass(frozen=True, slots=True)
class EffectResolution:
    player: PlayerState
    mutations: list[Mutation]
    applied: AppliedEffects

    @property
    def wrapped_day(self) -> bool:
        return any(isinstance(m, TimeAdvanced) and m.wrapped_days > 0 for m in self.mutations)


def modifier_for(modifiers: dict[str, MaskModifier], mask_id: str | None) -> MaskModifier | None:
    if mask_id is None:
        return None
    return modifiers.get(mask_id)


def resolve_effects(
    bundle: EffectBundle,
    modifier: MaskModifier | None,
    player: PlayerState,
) -> EffectResolution:
    state = player.model_copy(deep=True)
    mutations: list[Mutation] = []
    applied = AppliedEffects()

    # Modifiers only count while a mask is actually equipped.
    if state.current_mask_id is None:
        modifier = None

    if bundle.time is not None:
        advance = advance_clock(state.time, bundle.time)
        mutations.append(
            TimeAdvanced(previous=state.time, current=advance.time, minutes=bundle.time, wrapped_days=advance.wrapped_days)
        )
        state.time = advance.time
        state.day += advance.wrapped_days
        applied.time = bundle.time

    reputation = bundle.reputation or 0
    if modifier is not None:
        reputation += modifier.reputation_bonus
    if reputation:
        state.reputation += reputation
        applied.reputation = reputation
        mutations.append(ReputationChanged(delta=reputation, current=state.reputation))

    if bundle.energy:
        state.energy += bundle.energy
        applied.energy = bundle.energy
        mutations.append(EnergyChanged(delta=bundle.energy, current=state.energy))

    if bundle.corruption and state.current_mask_id is not None:
        loadout = MaskLoadout.for_player(state)
        mask_id = state.current_mask_id
        previous = loadout.corruption_of(mask_id)
        current = loadout.add_corruption(bundle.corruption)
        applied.corruption = current - previous
        mutations.append(CorruptionChanged(mask_id=mask_id, previous=previous, current=current))

    for npc_id, delta in bundle.relationships.items():
        effective = delta + (modifier.relationship_bonus if modifier is not None else 0)
        if effective == 0:
            continue
        created = npc_id not in state.relationships
        state.relationships[npc_id] = state.relationships.get(npc_id, 0) + effective
        applied.relationships[npc_id] = effective
        mutations.append(
            RelationshipUpserted(npc_id=npc_id, delta=effective, current=state.relationships[npc_id], created=created)
        )

    inventory = Inventory(state.inventory)
    for item_id, delta in bundle.items.items():
        mutation = inventory.apply_delta(item_id, delta)
        if mutation is not None:
            # An overdrawn stack is removed, so only what was held is applied.
            applied.items[item_id] = -mutation.previous if isinstance(mutation, InventoryRemoved) else delta
            mutations.append(mutation)

    if bundle.mood and bundle.mood != "neutral" and bundle.mood != state.mood:
        mutations.append(MoodChanged(previous=state.mood, current=bundle.mood))
        state.mood = bundle.mood
        applied.mood = bundle.mood

    return EffectResolution(player=state, mutations=mutations, applied=applied)
