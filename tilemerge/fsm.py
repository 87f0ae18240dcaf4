from __future__ import annotations

from statemachine import State, StateMachine

from tilemerge.api.models import GamePhase, GameState


class GameFSM(StateMachine):
    """FSM wrapper around GameState.

    - playing -> over once no direction can change the board.
    - over -> playing when an undo restores an earlier position.
    Moves themselves are applied by the session; the FSM only guards phases.
    """

    playing = State(GamePhase.playing.value, value=GamePhase.playing.value, initial=True)
    over = State(GamePhase.over.value, value=GamePhase.over.value)

    finish = playing.to(over)
    revive = over.to(playing)

    def __init__(self, game: GameState):
        self.game = game
        super().__init__(start_value=game.phase.value)

    def sync_phase_to_model(self) -> None:
        self.game.phase = GamePhase(str(self.current_state.value))
