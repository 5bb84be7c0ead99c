from __future__ import annotations

import random

import pytest

from masks.api.models import OwnedMask
from masks.content.models import MaskDefinition
from masks.content.singleton import get_content
from masks.core.mask_state import MaskLoadout, UnlockProgress, corruption_tier


def _loadout(*corruptions: tuple[str, int], equipped: str | None = None) -> MaskLoadout:
    owned = {mid: OwnedMask(mask_id=mid, corruption=c) for mid, c in corruptions}
    return MaskLoadout(owned=owned, equipped_id=equipped, definitions=get_content().masks)


def test_equip_requires_ownership() -> None:
    lo = _loadout(("mask_calm", 0))
    assert lo.equip("mask_charm") is False
    assert lo.equipped_id is None

    assert lo.equip("mask_calm") is True
    assert lo.equipped_id == "mask_calm"


def test_equip_replaces_previous_mask() -> None:
    lo = _loadout(("mask_calm", 0), ("mask_charm", 0), equipped="mask_calm")
    assert lo.equip("mask_charm")
    assert lo.equipped_id == "mask_charm"

    lo.unequip()
    assert lo.equipped_id is None


def test_refused_equip_keeps_current_mask() -> None:
    lo = _loadout(("mask_calm", 0), equipped="mask_calm")
    assert lo.equip("mask_void") is False
    assert lo.equipped_id == "mask_calm"


def test_add_corruption_clamps_both_ends() -> None:
    lo = _loadout(("mask_calm", 95), equipped="mask_calm")
    assert lo.add_corruption(20) == 100
    assert lo.add_corruption(-150) == 0
    assert lo.owned["mask_calm"].corruption == 0


def test_add_corruption_stays_in_range_for_any_sequence() -> None:
    rng = random.Random(7)
    lo = _loadout(("mask_calm", 50), equipped="mask_calm")
    for _ in range(200):
        value = lo.add_corruption(rng.randint(-60, 60))
        assert 0 <= value <= 100


def test_add_corruption_without_equipped_mask_is_noop() -> None:
    lo = _loadout(("mask_calm", 40))
    assert lo.add_corruption(10) == 0
    assert lo.owned["mask_calm"].corruption == 40


def test_reduce_corruption_targets_named_mask() -> None:
    lo = _loadout(("mask_calm", 30), ("mask_charm", 10), equipped="mask_charm")
    assert lo.reduce_corruption("mask_calm", 50) == 0
    assert lo.corruption_of("mask_charm") == 10
    assert lo.reduce_corruption("mask_void", 5) == 0


@pytest.mark.parametrize(
    ("corruption", "effect"),
    [(0, None), (24, None), (25, "mild"), (49, "mild"), (50, "moderate"), (89, "severe"), (90, "critical"), (100, "consumed")],
)
def test_corruption_tier_picks_highest_reached(corruption: int, effect: str | None) -> None:
    tier = corruption_tier(corruption)
    assert (tier.effect if tier else None) == effect


def test_unlock_requires_every_requirement() -> None:
    scholar = get_content().masks["mask_scholar"]
    lo = _loadout(("mask_calm", 0))

    only_classes = UnlockProgress(relationships={"npc_a": 10}, completed_classes=3)
    only_relationship = UnlockProgress(relationships={"npc_a": 60}, completed_classes=1)
    both = UnlockProgress(relationships={"npc_a": 60}, completed_classes=3)

    assert not lo.can_unlock(scholar, only_classes)
    assert not lo.can_unlock(scholar, only_relationship)
    assert lo.unlock("mask_scholar", mask=scholar, progress=only_classes) is False
    assert not lo.owns("mask_scholar")

    assert lo.unlock("mask_scholar", mask=scholar, progress=both) is True
    assert lo.owned["mask_scholar"].corruption == 0


def test_unlock_story_flags_come_from_caller() -> None:
    void = get_content().masks["mask_void"]
    lo = _loadout(("mask_calm", 60), ("mask_charm", 55))

    assert lo.unmet_requirements(void, UnlockProgress()) == ["experience_loss_event"]
    assert lo.can_unlock(void, UnlockProgress(satisfied_flags=frozenset({"experience_loss_event"})))

    lo.set_corruption("mask_charm", 49)
    assert lo.unmet_requirements(void, UnlockProgress(satisfied_flags=frozenset({"experience_loss_event"}))) == [
        "corruption_50_all_masks"
    ]


def test_relationship_below_20_checks_negative_affinity() -> None:
    mask = MaskDefinition(id="mask_x", name="X", unlock_requirements=["relationship_below_20"])
    lo = _loadout()
    assert not lo.can_unlock(mask, UnlockProgress(relationships={"a": -19, "b": 50}))
    assert lo.can_unlock(mask, UnlockProgress(relationships={"a": -20}))


def test_unlock_already_owned_is_refused() -> None:
    lo = _loadout(("mask_calm", 70))
    assert lo.unlock("mask_calm") is False
    assert lo.corruption_of("mask_calm") == 70


def test_abilities_and_bonus_stats_follow_equipped_mask() -> None:
    lo = _loadout(("mask_calm", 0), ("mask_charm", 0), equipped="mask_calm")
    assert lo.has_ability("empathy")
    assert not lo.has_ability("illusion")
    assert lo.bonus_stats().insight == 2
    assert lo.dialogue_color() == "#9ad0ec"

    lo.unequip()
    assert not lo.has_ability("empathy")
    assert lo.bonus_stats().insight == 0
    assert lo.dialogue_color() == "#ffffff"


def test_corruption_trigger_adds_one_to_three() -> None:
    lo = _loadout(("mask_charm", 10), equipped="mask_charm")
    value = lo.corruption_trigger("FLIRT with Aiko", rng=random.Random(1))
    assert 11 <= value <= 13

    before = lo.current_corruption
    assert lo.corruption_trigger("Study", rng=random.Random(1)) == before
