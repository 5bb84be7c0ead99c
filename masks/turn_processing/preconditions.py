from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from masks.api.models import PlayerState, SessionPhase
from masks.content.models import ActionDefinition
from masks.core.inventory import Inventory
from masks.errors import PreconditionError


@dataclass(frozen=True, slots=True)
class ValidationContext:
    player_id: str
    kind: str
    entity_id: str


class Precondition(ABC):
    """A pure check over static requirements and the current player snapshot."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, player: PlayerState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PhasePrecondition(Precondition):
    allowed_phases: frozenset[SessionPhase]

    def validate(self, *, ctx: ValidationContext, player: PlayerState) -> None:
        if player.phase not in self.allowed_phases:
            allowed = ",".join(sorted(p.value for p in self.allowed_phases))
            raise PreconditionError(f"'{ctx.kind}' not allowed in phase '{player.phase.value}' (allowed: {allowed})")


@dataclass(frozen=True, slots=True)
class MaskPrecondition(Precondition):
    """Equipped mask must be one of `mask_ids`; an empty list or ["any"] allows everything."""

    mask_ids: tuple[str, ...]

    def validate(self, *, ctx: ValidationContext, player: PlayerState) -> None:
        if not self.mask_ids or self.mask_ids[0] == "any":
            return
        if player.current_mask_id not in self.mask_ids:
            raise PreconditionError(f"{ctx.kind} '{ctx.entity_id}' requires one of masks: {','.join(self.mask_ids)}")


@dataclass(frozen=True, slots=True)
class InventoryPrecondition(Precondition):
    item_ids: tuple[str, ...]

    def validate(self, *, ctx: ValidationContext, player: PlayerState) -> None:
        missing = [i for i in self.item_ids if not Inventory(player.inventory).has(i)]
        if missing:
            raise PreconditionError(f"{ctx.kind} '{ctx.entity_id}' requires items: {','.join(missing)}")


@dataclass(frozen=True, slots=True)
class PreconditionPipeline:
    checks: tuple[Precondition, ...]

    def validate(self, *, ctx: ValidationContext, player: PlayerState) -> None:
        for check in self.checks:
            check.validate(ctx=ctx, player=player)

    def is_satisfied(self, *, ctx: ValidationContext, player: PlayerState) -> bool:
        try:
            self.validate(ctx=ctx, player=player)
        except PreconditionError:
            return False
        return True


EXPLORING_ONLY = PhasePrecondition(allowed_phases=frozenset({SessionPhase.exploring}))


def pipeline_for_action(action: ActionDefinition, *, check_phase: bool = True) -> PreconditionPipeline:
    checks: list[Precondition] = [EXPLORING_ONLY] if check_phase else []
    checks.append(MaskPrecondition(mask_ids=tuple(action.preconditions.masks)))
    checks.append(InventoryPrecondition(item_ids=tuple(action.preconditions.inventory)))
    return PreconditionPipeline(checks=tuple(checks))


def exploring_pipeline() -> PreconditionPipeline:
    return PreconditionPipeline(checks=(EXPLORING_ONLY,))
