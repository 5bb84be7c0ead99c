"""Per-player mask ownership, equipment and corruption.

`MaskLoadout` is an explicit state object owned by the caller; it wraps the
`masks` / `current_mask_id` fields of a player snapshot and mutates them in
place. Corruption is always kept in [0, 100].
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from masks.api.models import OwnedMask, PlayerState
from masks.content.models import BonusStats, MaskDefinition

logger = logging.getLogger(__name__)

MIN_CORRUPTION = 0
MAX_CORRUPTION = 100


@dataclass(frozen=True, slots=True)
class CorruptionTier:
    threshold: int
    effect: str
    description: str


CORRUPTION_TIERS: tuple[CorruptionTier, ...] = (
    CorruptionTier(25, "mild", "Slight personality shifts"),
    CorruptionTier(50, "moderate", "NPCs notice changes in behavior"),
    CorruptionTier(75, "severe", "Dark dialogue options unlock"),
    CorruptionTier(90, "critical", "Nightmares and loss of control"),
    CorruptionTier(100, "consumed", "Mask has taken over"),
)


def clamp_corruption(value: int) -> int:
    return max(MIN_CORRUPTION, min(MAX_CORRUPTION, value))


def corruption_tier(corruption: int) -> CorruptionTier | None:
    """Highest tier whose threshold has been reached, or None below the first."""

    active: CorruptionTier | None = None
    for tier in CORRUPTION_TIERS:
        if corruption >= tier.threshold:
            active = tier
    return active


@dataclass(frozen=True, slots=True)
class UnlockProgress:
    """Aggregate player progress that unlock requirements are checked against.

    `satisfied_flags` carries story requirements (e.g. "experience_conflict")
    that are decided outside this model.
    """

    relationships: Mapping[str, int] = field(default_factory=dict)
    completed_classes: int = 0
    satisfied_flags: frozenset[str] = frozenset()

    @staticmethod
    def from_player(player: PlayerState, *, flags: frozenset[str] = frozenset()) -> "UnlockProgress":
        return UnlockProgress(
            relationships=dict(player.relationships),
            completed_classes=player.completed_classes,
            satisfied_flags=flags,
        )


class MaskLoadout:
    def __init__(
        self,
        *,
        owned: dict[str, OwnedMask],
        equipped_id: str | None = None,
        definitions: Mapping[str, MaskDefinition] | None = None,
    ):
        self.owned = owned
        self.equipped_id = equipped_id if equipped_id in owned else None
        self.definitions = definitions or {}

    @classmethod
    def for_player(cls, player: PlayerState, definitions: Mapping[str, MaskDefinition] | None = None) -> "MaskLoadout":
        # Shares the player's dict, so changes land directly on the snapshot.
        return cls(owned=player.masks, equipped_id=player.current_mask_id, definitions=definitions)

    def sync_to(self, player: PlayerState) -> None:
        player.masks = self.owned
        player.current_mask_id = self.equipped_id

    def owns(self, mask_id: str) -> bool:
        return mask_id in self.owned

    def equip(self, mask_id: str) -> bool:
        if not self.owns(mask_id):
            logger.warning("cannot equip mask %s: not owned", mask_id)
            return False
        self.equipped_id = mask_id
        return True

    def unequip(self) -> None:
        self.equipped_id = None

    @property
    def equipped(self) -> MaskDefinition | None:
        if self.equipped_id is None:
            return None
        return self.definitions.get(self.equipped_id)

    def corruption_of(self, mask_id: str) -> int:
        state = self.owned.get(mask_id)
        return state.corruption if state is not None else 0

    @property
    def current_corruption(self) -> int:
        if self.equipped_id is None:
            return 0
        return self.corruption_of(self.equipped_id)

    def set_corruption(self, mask_id: str, value: int) -> int:
        state = self.owned.get(mask_id)
        if state is None:
            return 0
        state.corruption = clamp_corruption(value)
        return state.corruption

    def add_corruption(self, delta: int) -> int:
        """Add corruption to the equipped mask; no-op (returns 0) when none is equipped."""

        if self.equipped_id is None:
            return 0
        return self.set_corruption(self.equipped_id, self.current_corruption + delta)

    def reduce_corruption(self, mask_id: str, amount: int) -> int:
        return self.set_corruption(mask_id, self.corruption_of(mask_id) - amount)

    def corruption_tier(self) -> CorruptionTier | None:
        return corruption_tier(self.current_corruption)

    def has_ability(self, ability: str) -> bool:
        mask = self.equipped
        if mask is None:
            return False
        return bool(getattr(mask.abilities, ability, False))

    def bonus_stats(self) -> BonusStats:
        mask = self.equipped
        return mask.daily_effects.bonus_stats if mask is not None else BonusStats()

    def dialogue_color(self) -> str:
        mask = self.equipped
        return mask.daily_effects.dialogue_color if mask is not None else "#ffffff"

    def corruption_trigger(self, action_name: str, *, rng: random.Random) -> int:
        """Add 1-3 corruption when an action name matches an equipped mask trigger.

        Returns the equipped mask's corruption after the check.
        """

        mask = self.equipped
        if mask is None:
            return 0

        name = action_name.casefold()
        if any(t.casefold() in name for t in mask.corruption_triggers):
            return self.add_corruption(rng.randint(1, 3))
        return self.current_corruption

    def _requirement_met(self, requirement: str, progress: UnlockProgress) -> bool:
        if requirement == "complete_three_classes":
            return progress.completed_classes >= 3
        if requirement == "reach_relationship_60":
            return any(a >= 60 for a in progress.relationships.values())
        if requirement == "relationship_below_20":
            return any(a <= -20 for a in progress.relationships.values())
        if requirement == "corruption_50_all_masks":
            return all(m.corruption >= 50 for m in self.owned.values())
        # Story requirements are decided by the caller.
        return requirement in progress.satisfied_flags

    def can_unlock(self, mask: MaskDefinition, progress: UnlockProgress) -> bool:
        return all(self._requirement_met(req, progress) for req in mask.unlock_requirements)

    def unmet_requirements(self, mask: MaskDefinition, progress: UnlockProgress) -> list[str]:
        return [req for req in mask.unlock_requirements if not self._requirement_met(req, progress)]

    def unlock(self, mask_id: str, *, mask: MaskDefinition | None = None, progress: UnlockProgress | None = None) -> bool:
        """Add a mask at corruption 0.

        When a definition is given, every unlock requirement must pass. Returns
        False if the mask is already owned or a requirement fails.
        """

        if self.owns(mask_id):
            return False
        if mask is not None and not self.can_unlock(mask, progress or UnlockProgress()):
            return False
        self.owned[mask_id] = OwnedMask(mask_id=mask_id, corruption=0)
        return True
