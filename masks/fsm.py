from __future__ import annotations

from statemachine import State, StateMachine

from masks.api.models import PlayerState, SessionPhase


class SessionFSM(StateMachine):
    """FSM wrapper around a player's session phase.

    - phases: mask selection -> exploring <-> day recap
    - handlers mutate the player; the FSM only guards transitions.
    """

    mask_selection = State(SessionPhase.mask_selection.value, value=SessionPhase.mask_selection.value, initial=True)
    exploring = State(SessionPhase.exploring.value, value=SessionPhase.exploring.value)
    day_recap = State(SessionPhase.day_recap.value, value=SessionPhase.day_recap.value)

    start_day = mask_selection.to(exploring)
    end_day = exploring.to(day_recap)
    next_day = day_recap.to(exploring)

    def __init__(self, player: PlayerState):
        self.player = player
        super().__init__(start_value=player.phase.value)

    def sync_phase_to_model(self) -> None:
        self.player.phase = SessionPhase(str(self.current_state_value))
