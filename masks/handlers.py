from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Literal

import redis
from statemachine.exceptions import TransitionNotAllowed

from masks.api.models import MinigameProgress, PlayerState, SessionPhase
from masks.content.models import ActionDefinition, EffectBundle, EventDefinition, MinigameRewards
from masks.content.singleton import get_content
from masks.core.clock import DAY_START
from masks.core.effects import AppliedEffects, EffectResolution, modifier_for, resolve_effects
from masks.core.inventory import Inventory
from masks.core.mask_state import MaskLoadout, UnlockProgress
from masks.core.mutations import CorruptionChanged, EventCompleted, MinigameRecorded, Mutation
from masks.core.recap import DayRecap, build_day_recap
from masks.errors import NotFoundError, PreconditionError
from masks.fsm import SessionFSM
from masks.lock import player_lock
from masks.player_store import require_player, save_player
from masks.streams import Journal, append_to_journal, read_journal
from masks.turn_processing.preconditions import (
    PhasePrecondition,
    ValidationContext,
    exploring_pipeline,
    pipeline_for_action,
)

logger = logging.getLogger(__name__)

SourceKind = Literal["action", "event", "item", "minigame"]


@dataclass(frozen=True, slots=True)
class MinigameOutcome:
    final_score: int
    completed: bool
    rewards: MinigameRewards | None


@dataclass(frozen=True, slots=True)
class HandlerResult:
    player: PlayerState
    applied: AppliedEffects
    mutations: list[Mutation]
    outcome: MinigameOutcome | None = None
    journal_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class EquipResult:
    player: PlayerState
    equipped: bool


@dataclass(frozen=True, slots=True)
class UnlockResult:
    player: PlayerState
    unlocked: bool
    unmet_requirements: list[str]


def _journal_entries(*, source: SourceKind, entity_id: str, day: int, mutations: list[Mutation]) -> list[dict[str, str]]:
    tag = {"source": source, "entity_id": entity_id, "day": str(day)}
    entries = [{"type": "resolution", **tag}]
    for m in mutations:
        entries.append({**m.as_fields(), **tag})
    return entries


def _commit(
    *,
    r: redis.Redis,
    source: SourceKind,
    entity_id: str,
    day: int,
    resolution: EffectResolution,
    extra: list[Mutation] | None = None,
    outcome: MinigameOutcome | None = None,
) -> HandlerResult:
    """Persist a resolved snapshot and publish its mutation log.

    `day` is the day the resolution started on, so a wrap past midnight is
    still counted towards the day that just ended.
    """

    player = resolution.player
    mutations = [*resolution.mutations, *(extra or [])]

    if resolution.wrapped_day:
        fsm = SessionFSM(player)
        fsm.end_day()
        fsm.sync_phase_to_model()

    save_player(r=r, player=player)
    ids = append_to_journal(
        r=r,
        journal=Journal(player_id=player.player_id),
        entries=_journal_entries(source=source, entity_id=entity_id, day=day, mutations=mutations),
    )

    for m in mutations:
        logger.debug("player %s %s: %s", player.player_id, source, m)
    logger.info(
        "player %s applied %s %s (%d mutations, time=%s, phase=%s)",
        player.player_id,
        source,
        entity_id,
        len(mutations),
        player.time,
        player.phase.value,
    )

    return HandlerResult(player=player, applied=resolution.applied, mutations=mutations, outcome=outcome, journal_ids=ids)


def _require_action(action_id: str) -> ActionDefinition:
    action = get_content().actions.get(action_id)
    if action is None:
        raise NotFoundError("Action not found")
    return action


def _require_event(event_id: str) -> EventDefinition:
    event = get_content().events.get(event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def execute_action(
    *,
    r: redis.Redis,
    player_id: str,
    action_id: str,
    rng: random.Random | None = None,
) -> HandlerResult:
    action = _require_action(action_id)

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        ctx = ValidationContext(player_id=player_id, kind="action", entity_id=action_id)
        pipeline_for_action(action).validate(ctx=ctx, player=player)

        modifier = modifier_for(action.mask_modifiers, player.current_mask_id)
        resolution = resolve_effects(action.bundle(), modifier, player)

        # Acting against a mask's nature (its trigger keywords) feeds its corruption.
        extra: list[Mutation] = []
        resolved = resolution.player
        loadout = MaskLoadout.for_player(resolved, get_content().masks)
        if loadout.equipped is not None:
            previous = loadout.current_corruption
            loadout.corruption_trigger(action.name, rng=rng or random.Random())
            current = loadout.current_corruption
            if current != previous:
                extra.append(CorruptionChanged(mask_id=loadout.equipped.id, previous=previous, current=current))
                resolution.applied.corruption += current - previous

        return _commit(r=r, source="action", entity_id=action_id, day=player.day, resolution=resolution, extra=extra)


def make_event_choice(*, r: redis.Redis, player_id: str, event_id: str, choice_id: str) -> HandlerResult:
    event = _require_event(event_id)
    choice = event.choice(choice_id)
    if choice is None:
        raise NotFoundError("Choice not found")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        ctx = ValidationContext(player_id=player_id, kind="event", entity_id=event_id)
        exploring_pipeline().validate(ctx=ctx, player=player)

        modifier = modifier_for(event.mask_modifiers, player.current_mask_id)
        resolution = resolve_effects(choice.bundle(), modifier, player)
        resolution.player.events_completed[event_id] = choice_id

        return _commit(
            r=r,
            source="event",
            entity_id=event_id,
            day=player.day,
            resolution=resolution,
            extra=[EventCompleted(event_id=event_id, choice_id=choice_id)],
        )


def use_item(*, r: redis.Redis, player_id: str, item_id: str) -> HandlerResult:
    item = get_content().items.get(item_id)
    if item is None:
        raise NotFoundError("Item not found")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        if not Inventory(player.inventory).has(item_id):
            raise NotFoundError("Item not found in inventory")
        ctx = ValidationContext(player_id=player_id, kind="item", entity_id=item_id)
        exploring_pipeline().validate(ctx=ctx, player=player)

        bundle = item.effects
        if item.type == "consumable":
            items = dict(bundle.items)
            items[item_id] = items.get(item_id, 0) - 1
            bundle = bundle.model_copy(update={"items": items})

        resolution = resolve_effects(bundle, None, player)
        return _commit(r=r, source="item", entity_id=item_id, day=player.day, resolution=resolution)


def submit_minigame_result(*, r: redis.Redis, player_id: str, minigame_id: str, score: int) -> HandlerResult:
    minigame = get_content().minigames.get(minigame_id)
    if minigame is None:
        raise NotFoundError("Minigame not found")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        ctx = ValidationContext(player_id=player_id, kind="minigame", entity_id=minigame_id)
        exploring_pipeline().validate(ctx=ctx, player=player)

        modifier = modifier_for(minigame.mask_modifiers, player.current_mask_id)
        final_score = score + (modifier.bonus_score if modifier is not None else 0)
        completed = final_score >= minigame.pass_score

        resolution = resolve_effects(EffectBundle(), None, player)
        resolved = resolution.player
        resolved.minigame_progress[minigame_id] = MinigameProgress(score=max(final_score, 0), completed=completed)

        rewards: MinigameRewards | None = None
        if completed:
            rewards = minigame.rewards
            resolved.grade += rewards.grade
            resolved.stats.insight += rewards.insight
            resolved.stats.charm += rewards.charm
            resolved.stats.chaos += rewards.chaos

        return _commit(
            r=r,
            source="minigame",
            entity_id=minigame_id,
            day=player.day,
            resolution=resolution,
            extra=[MinigameRecorded(minigame_id=minigame_id, score=max(final_score, 0), completed=completed)],
            outcome=MinigameOutcome(final_score=final_score, completed=completed, rewards=rewards),
        )


def equip_mask(*, r: redis.Redis, player_id: str, mask_id: str) -> EquipResult:
    """Equip an owned mask. Not owning it is reported through `equipped`, not raised."""

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        loadout = MaskLoadout.for_player(player, get_content().masks)
        if not loadout.equip(mask_id):
            return EquipResult(player=player, equipped=False)
        loadout.sync_to(player)
        save_player(r=r, player=player)
        return EquipResult(player=player, equipped=True)


def unequip_mask(*, r: redis.Redis, player_id: str) -> PlayerState:
    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        loadout = MaskLoadout.for_player(player)
        loadout.unequip()
        loadout.sync_to(player)
        save_player(r=r, player=player)
        return player


def choose_starting_mask(*, r: redis.Redis, player_id: str, mask_id: str) -> PlayerState:
    mask = get_content().masks.get(mask_id)
    if mask is None:
        raise NotFoundError("Mask not found")
    if mask.unlock_requirements:
        raise PreconditionError(f"Mask '{mask_id}' cannot be chosen as a starting mask")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        ctx = ValidationContext(player_id=player_id, kind="choose_mask", entity_id=mask_id)
        PhasePrecondition(allowed_phases=frozenset({SessionPhase.mask_selection})).validate(ctx=ctx, player=player)

        loadout = MaskLoadout.for_player(player, get_content().masks)
        loadout.unlock(mask_id)
        loadout.equip(mask_id)
        loadout.sync_to(player)

        fsm = SessionFSM(player)
        fsm.start_day()
        fsm.sync_phase_to_model()

        save_player(r=r, player=player)
        logger.info("player %s chose starting mask %s", player_id, mask_id)
        return player


def unlock_mask(*, r: redis.Redis, player_id: str, mask_id: str, flags: frozenset[str] = frozenset()) -> UnlockResult:
    mask = get_content().masks.get(mask_id)
    if mask is None:
        raise NotFoundError("Mask not found")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        loadout = MaskLoadout.for_player(player, get_content().masks)
        progress = UnlockProgress.from_player(player, flags=flags)

        if loadout.owns(mask_id):
            return UnlockResult(player=player, unlocked=False, unmet_requirements=[])

        unmet = loadout.unmet_requirements(mask, progress)
        if unmet:
            return UnlockResult(player=player, unlocked=False, unmet_requirements=unmet)

        loadout.unlock(mask_id, mask=mask, progress=progress)
        loadout.sync_to(player)
        save_player(r=r, player=player)
        logger.info("player %s unlocked mask %s", player_id, mask_id)
        return UnlockResult(player=player, unlocked=True, unmet_requirements=[])


def acknowledge_recap(*, r: redis.Redis, player_id: str) -> PlayerState:
    """Close the day recap and start the next morning."""

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        fsm = SessionFSM(player)
        try:
            fsm.next_day()
        except TransitionNotAllowed as e:
            raise PreconditionError("No day recap is pending") from e
        fsm.sync_phase_to_model()

        player.time = DAY_START
        save_player(r=r, player=player)
        return player


def move_to_zone(*, r: redis.Redis, player_id: str, zone_id: str) -> PlayerState:
    if zone_id not in get_content().zones:
        raise NotFoundError("Zone not found")

    with player_lock(r=r, player_id=player_id):
        player = require_player(r=r, player_id=player_id)
        ctx = ValidationContext(player_id=player_id, kind="move", entity_id=zone_id)
        exploring_pipeline().validate(ctx=ctx, player=player)

        player.zone_id = zone_id
        save_player(r=r, player=player)
        logger.info("player %s moved to zone %s", player_id, zone_id)
        return player


def _zone_for(player: PlayerState, zone_id: str | None) -> str:
    zone_id = zone_id or player.zone_id
    if zone_id is None:
        raise PreconditionError("Player is not in any zone")
    return zone_id


def available_actions(*, r: redis.Redis, player_id: str, zone_id: str | None = None) -> list[ActionDefinition]:
    """Actions the player can take in `zone_id`, or in their current zone when omitted."""

    player = require_player(r=r, player_id=player_id)
    zone_id = _zone_for(player, zone_id)
    out: list[ActionDefinition] = []
    for action in get_content().actions_in_zone(zone_id):
        ctx = ValidationContext(player_id=player_id, kind="action", entity_id=action.id)
        if pipeline_for_action(action, check_phase=False).is_satisfied(ctx=ctx, player=player):
            out.append(action)
    return out


def roll_event(
    *,
    r: redis.Redis,
    player_id: str,
    rng: random.Random,
    zone_id: str | None = None,
) -> EventDefinition | None:
    """Pick an uncompleted zone event by cumulative trigger chance (percent)."""

    player = require_player(r=r, player_id=player_id)
    zone_id = _zone_for(player, zone_id)
    candidates = [e for e in get_content().events_in_zone(zone_id) if e.id not in player.events_completed]
    if not candidates:
        return None

    roll = rng.random() * 100
    cumulative = 0.0
    for event in candidates:
        cumulative += event.trigger_chance
        if roll <= cumulative:
            return event
    return None


def npc_reaction(*, npc_id: str, mask_id: str) -> str:
    npc = get_content().npcs.get(npc_id)
    if npc is None:
        raise NotFoundError("NPC not found")
    return npc.reactions.get(mask_id, "No specific reaction.")


def npc_affinity(*, r: redis.Redis, player_id: str, npc_id: str) -> int:
    npc = get_content().npcs.get(npc_id)
    if npc is None:
        raise NotFoundError("NPC not found")
    player = require_player(r=r, player_id=player_id)
    return player.relationships.get(npc_id, npc.relationship)


def day_recap(*, r: redis.Redis, player_id: str, day: int | None = None) -> DayRecap:
    """Recap of `day`; defaults to the day just ended while a recap is pending."""

    player = require_player(r=r, player_id=player_id)
    if day is None:
        day = player.day - 1 if player.phase == SessionPhase.day_recap else player.day
    entries = read_journal(r=r, journal=Journal(player_id=player_id))
    return build_day_recap(day=day, entries=entries, owned_masks=player.masks)

