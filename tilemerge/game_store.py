from __future__ import annotations

import logging
import os
import random
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from tilemerge.api.models import GamePhase, GameState, HistoryEntry
from tilemerge.core import GameSession, Grid, HistoryStack, Snapshot
from tilemerge.fsm import GameFSM
from tilemerge.streams import EventStream, publish_event


logger = logging.getLogger(__name__)

GAMES_SET_KEY = "tilemerge:games"
GAME_KEY_PREFIX = "tilemerge:game:"  # + {uuid}
BEST_SCORE_KEY = "tilemerge:best"
GRID_SIZE_KEY = "tilemerge:size"


class GameNotFoundError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _game_key(game_id: UUID) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}"


def default_size() -> int:
    return int(os.environ.get("TILEMERGE_DEFAULT_SIZE", "4"))


def get_preferred_size(*, r: redis.Redis) -> int:
    raw = r.get(GRID_SIZE_KEY)
    if not raw:
        return default_size()
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed preferred size %r", raw)
        return default_size()


def set_preferred_size(*, r: redis.Redis, size: int) -> None:
    r.set(GRID_SIZE_KEY, str(size))


def _parse_best(raw: str | None) -> int:
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed best score %r", raw)
        return 0


def get_best_score(*, r: redis.Redis) -> int:
    return _parse_best(r.get(BEST_SCORE_KEY))


def record_score(*, r: redis.Redis, score: int) -> int:
    """Raise the stored best score to `score` if higher; returns the best score.

    The best score is shared by all games, so the read-max-write runs as a
    WATCH/MULTI transaction and retries if another writer got there first.
    """

    def _raise_best(pipe: redis.client.Pipeline) -> int:
        best = max(_parse_best(pipe.get(BEST_SCORE_KEY)), score)
        pipe.multi()
        pipe.set(BEST_SCORE_KEY, str(best))
        return best

    return r.transaction(_raise_best, BEST_SCORE_KEY, value_from_callable=True)


def session_from_state(state: GameState) -> GameSession:
    """Rebuild a core session from the persisted document.

    The generator is derived from (seed, turn) so every turn spawns
    deterministically for a given seed, while undo + replay still sees fresh tiles.
    """

    history = HistoryStack(
        entries=[Snapshot(size=state.size, cells=tuple(h.cells), score=h.score) for h in state.history]
    )
    rng = random.Random(f"{state.seed}:{state.turn}")
    return GameSession(Grid(size=state.size, cells=list(state.grid)), state.score, history=history, rng=rng)


def apply_session_to_state(*, state: GameState, session: GameSession) -> None:
    state.grid = list(session.grid.cells)
    state.score = session.score
    state.history = [HistoryEntry(cells=list(s.cells), score=s.score) for s in session.history.snapshots()]


def save_game(*, r: redis.Redis, state: GameState) -> None:
    state.last_updated_at = _now()
    r.set(_game_key(state.game_id), state.model_dump_json())


def get_game(*, r: redis.Redis, game_id: UUID) -> GameState | None:
    raw = r.get(_game_key(game_id))
    if not raw:
        return None
    return GameState.model_validate_json(raw)


def require_game(*, r: redis.Redis, game_id: UUID) -> GameState:
    state = get_game(r=r, game_id=game_id)
    if state is None:
        raise GameNotFoundError("Game not found")
    return state


def create_game(*, r: redis.Redis, size: int | None = None, seed: int | None = None) -> GameState:
    if size is None:
        size = get_preferred_size(r=r)
    if seed is None:
        seed = random.SystemRandom().randint(1, 2**31 - 1)

    game_id = uuid4()
    now = _now()

    session = GameSession.new(size, rng=random.Random(f"{seed}:start"))

    state = GameState(
        game_id=game_id,
        size=size,
        created_at=now,
        last_updated_at=now,
        seed=seed,
        grid=list(session.grid.cells),
        score=0,
        phase=GamePhase.playing,
    )

    if session.game_over:
        fsm = GameFSM(state)
        fsm.finish()
        fsm.sync_phase_to_model()

    r.set(_game_key(game_id), state.model_dump_json())
    r.sadd(GAMES_SET_KEY, str(game_id))
    set_preferred_size(r=r, size=size)

    stream = EventStream(game_id=str(game_id))
    for tile in session.initial_spawn:
        publish_event(
            r=r,
            stream=stream,
            fields={"type": "tile_spawned", "game_id": str(game_id), "index": str(tile.index), "value": str(tile.value)},
        )

    logger.info("Created game %s (size=%d, seed=%d)\n%s", game_id, size, seed, session.grid.render())
    return state


def list_games(*, r: redis.Redis) -> list[GameState]:
    ids = sorted(r.smembers(GAMES_SET_KEY))
    out: list[GameState] = []
    for sid in ids:
        try:
            gid = UUID(sid)
        except ValueError:
            continue
        state = get_game(r=r, game_id=gid)
        if state is not None:
            out.append(state)
    out.sort(key=lambda s: s.created_at, reverse=True)
    return out
