from __future__ import annotations

import pytest

from masks.api.models import SessionPhase
from masks.content.models import ActionDefinition, ActionPreconditions
from masks.content.singleton import get_content
from masks.errors import PreconditionError
from masks.turn_processing.preconditions import ValidationContext, pipeline_for_action


def _ctx(action_id: str) -> ValidationContext:
    return ValidationContext(player_id="p1", kind="action", entity_id=action_id)


def test_mask_precondition_requires_listed_mask(make_player) -> None:
    flirt = get_content().actions["flirt"]
    pipe = pipeline_for_action(flirt)

    with pytest.raises(PreconditionError) as e:
        pipe.validate(ctx=_ctx("flirt"), player=make_player(current_mask_id=None))
    assert "mask_charm" in str(e.value)

    player = make_player(current_mask_id="mask_charm", masks={"mask_charm": {"mask_id": "mask_charm"}})
    pipe.validate(ctx=_ctx("flirt"), player=player)


@pytest.mark.parametrize("masks", [[], ["any"]])
def test_mask_precondition_unrestricted(make_player, masks: list[str]) -> None:
    action = ActionDefinition(id="a", name="A", preconditions=ActionPreconditions(masks=masks))
    assert pipeline_for_action(action).is_satisfied(ctx=_ctx("a"), player=make_player())


def test_inventory_precondition_needs_every_item(make_player) -> None:
    action = ActionDefinition(id="a", name="A", preconditions=ActionPreconditions(inventory=["library_card", "coin"]))
    pipe = pipeline_for_action(action)

    assert not pipe.is_satisfied(ctx=_ctx("a"), player=make_player(inventory={"library_card": 1}))
    assert pipe.is_satisfied(ctx=_ctx("a"), player=make_player(inventory={"library_card": 1, "coin": 3}))


def test_phase_precondition_blocks_outside_exploring(make_player) -> None:
    chat = get_content().actions["chat"]
    player = make_player(phase=SessionPhase.day_recap)

    with pytest.raises(PreconditionError) as e:
        pipeline_for_action(chat).validate(ctx=_ctx("chat"), player=player)
    assert "day_recap" in str(e.value)

    assert pipeline_for_action(chat, check_phase=False).is_satisfied(ctx=_ctx("chat"), player=player)
