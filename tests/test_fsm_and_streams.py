from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import fakeredis
import pytest
from statemachine.exceptions import TransitionNotAllowed

from tilemerge.actions import dispatch_action
from tilemerge.api.models import GamePhase, GameState
from tilemerge.fsm import GameFSM
from tilemerge.game_store import create_game, get_game, save_game
from tilemerge.streams import EventStream, publish_event


def _state(phase: GamePhase = GamePhase.playing) -> GameState:
    now = datetime.now(tz=UTC)
    return GameState(
        game_id=uuid4(),
        size=2,
        created_at=now,
        last_updated_at=now,
        seed=1,
        grid=[2, 4, 4, 2],
        phase=phase,
    )


def test_fsm_finish_and_revive() -> None:
    state = _state()
    fsm = GameFSM(state)
    assert fsm.current_state == fsm.playing

    fsm.finish()
    fsm.sync_phase_to_model()
    assert state.phase == GamePhase.over

    fsm.revive()
    fsm.sync_phase_to_model()
    assert state.phase == GamePhase.playing


def test_fsm_starts_from_persisted_phase() -> None:
    fsm = GameFSM(_state(GamePhase.over))
    assert fsm.current_state == fsm.over
    with pytest.raises(TransitionNotAllowed):
        fsm.finish()


def test_event_stream_key_and_publish(redis_client: fakeredis.FakeRedis) -> None:
    stream = EventStream(game_id="g1")
    assert stream.key == "events:g1"

    publish_event(r=redis_client, stream=stream, fields={"type": "tile_spawned", "index": "3"})
    entries = redis_client.xrange(stream.key)
    assert len(entries) == 1
    assert entries[0][1] == {"type": "tile_spawned", "index": "3"}


def test_dispatch_unknown_action_rejected(redis_client: fakeredis.FakeRedis) -> None:
    state = create_game(r=redis_client, size=3, seed=5)
    with pytest.raises(ValueError) as e:
        dispatch_action(r=redis_client, game_id=state.game_id, action="teleport", payload={})  # type: ignore[arg-type]
    assert "Unknown action" in str(e.value)

    # The lock is released even when the action fails.
    assert redis_client.get(f"lock:tilemerge:{state.game_id}") is None


def test_dispatch_move_persists_session(redis_client: fakeredis.FakeRedis) -> None:
    state = create_game(r=redis_client, size=4, seed=5)
    state.grid = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 4, 4, 0, 0]
    save_game(r=redis_client, state=state)

    result = dispatch_action(r=redis_client, game_id=state.game_id, action="move", payload={"direction": "right"})

    assert result.outcome is not None
    assert result.outcome.moved is True
    assert result.outcome.gained == 8
    assert result.event_ids

    stored = get_game(r=redis_client, game_id=state.game_id)
    assert stored is not None
    assert stored.grid[15] == 8
    assert stored.score == 8
    assert len(stored.history) == 1


def test_same_seed_and_turn_spawn_identically(redis_client: fakeredis.FakeRedis) -> None:
    grids = []
    for _ in range(2):
        state = create_game(r=redis_client, size=4, seed=77)
        for d in ("left", "up", "right", "down"):
            dispatch_action(r=redis_client, game_id=state.game_id, action="move", payload={"direction": d})
        stored = get_game(r=redis_client, game_id=state.game_id)
        assert stored is not None
        grids.append(stored.grid)
    assert grids[0] == grids[1]
