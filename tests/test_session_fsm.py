from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from masks.api.models import SessionPhase
from masks.fsm import SessionFSM


def test_fsm_starts_from_the_player_phase(make_player) -> None:
    player = make_player(phase=SessionPhase.day_recap)
    fsm = SessionFSM(player)
    assert fsm.current_state_value == "day_recap"


def test_full_day_cycle(make_player) -> None:
    player = make_player(phase=SessionPhase.mask_selection)
    fsm = SessionFSM(player)

    fsm.start_day()
    fsm.sync_phase_to_model()
    assert player.phase == SessionPhase.exploring

    fsm.end_day()
    fsm.sync_phase_to_model()
    assert player.phase == SessionPhase.day_recap

    fsm.next_day()
    fsm.sync_phase_to_model()
    assert player.phase == SessionPhase.exploring


@pytest.mark.parametrize(
    ("phase", "event"),
    [
        (SessionPhase.mask_selection, "end_day"),
        (SessionPhase.mask_selection, "next_day"),
        (SessionPhase.exploring, "start_day"),
        (SessionPhase.exploring, "next_day"),
        (SessionPhase.day_recap, "end_day"),
    ],
)
def test_illegal_transitions_are_rejected(make_player, phase: SessionPhase, event: str) -> None:
    player = make_player(phase=phase)
    fsm = SessionFSM(player)
    with pytest.raises(TransitionNotAllowed):
        getattr(fsm, event)()
    assert player.phase == phase
