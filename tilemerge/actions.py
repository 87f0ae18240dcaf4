from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID

import redis

from tilemerge.api.models import GameState
from tilemerge.core import Direction, MoveOutcome, TieBreak, parse_direction
from tilemerge.fsm import GameFSM
from tilemerge.game_store import apply_session_to_state, record_score, require_game, save_game, session_from_state
from tilemerge.lock import game_lock
from tilemerge.streams import EventStream, publish_many


logger = logging.getLogger(__name__)

ActionName = Literal["move", "undo"]


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of applying an action.

    - `outcome`: the core move outcome (moves only).
    - `undone`: whether an undo restored a snapshot (undo only).
    - `event_ids`: ids of the entries published to the game's event stream.
    """

    state: GameState
    outcome: MoveOutcome | None
    undone: bool
    event_ids: list[str]


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _events_for_move(*, state: GameState, direction: str, outcome: MoveOutcome) -> list[tuple[str, dict[str, str]]]:
    gid = str(state.game_id)
    key = EventStream(game_id=gid).key
    if not outcome.moved:
        return []

    entries: list[tuple[str, dict[str, str]]] = [
        (
            key,
            {
                "type": "tiles_moved",
                "game_id": gid,
                "direction": direction,
                "gained": str(outcome.gained),
                "score": str(outcome.score),
                "ts": _now_iso(),
            },
        )
    ]
    for tile in outcome.spawned:
        entries.append(
            (
                key,
                {
                    "type": "tile_spawned",
                    "game_id": gid,
                    "index": str(tile.index),
                    "value": str(tile.value),
                    "ts": _now_iso(),
                },
            )
        )
    if outcome.game_over:
        entries.append((key, {"type": "game_over", "game_id": gid, "score": str(outcome.score), "ts": _now_iso()}))
    return entries


def _events_for_undo(*, state: GameState) -> list[tuple[str, dict[str, str]]]:
    gid = str(state.game_id)
    return [
        (
            EventStream(game_id=gid).key,
            {"type": "move_undone", "game_id": gid, "score": str(state.score), "ts": _now_iso()},
        )
    ]


def dispatch_action(*, r: redis.Redis, game_id: UUID, action: ActionName, payload: dict[str, Any]) -> ActionResult:
    """Entry point for every state-changing request.

    Applies an action by:
    - acquiring a per-game lock
    - loading game state and rebuilding the core session
    - applying the move/undo and syncing the phase through the FSM
    - persisting state and the best score
    - emitting event stream entries (Redis Streams)
    """

    with game_lock(r=r, game_id=str(game_id)):
        state = require_game(r=r, game_id=game_id)
        session = session_from_state(state)
        fsm = GameFSM(state)

        outcome: MoveOutcome | None = None
        undone = False

        if action == "move":
            direction = parse_direction(str(payload.get("direction")))
            outcome = session.apply_move(direction)
            if outcome.moved:
                state.turn += 1
                logger.debug(
                    "Game %s: %s gained %d (score=%d)\n%s",
                    game_id,
                    direction.value,
                    outcome.gained,
                    outcome.score,
                    session.grid.render(),
                )
            if outcome.game_over and fsm.current_state == fsm.playing:
                fsm.finish()
                logger.info("Game %s over with score %d", game_id, session.score)
            entries = _events_for_move(state=state, direction=direction.value, outcome=outcome)

        elif action == "undo":
            undone = session.undo() is not None
            if undone and fsm.current_state == fsm.over and not session.game_over:
                fsm.revive()
            entries = []
            logger.debug("Game %s: undo %s (score=%d)", game_id, "applied" if undone else "skipped", session.score)

        else:
            raise ValueError(f"Unknown action: {action}")

        apply_session_to_state(state=state, session=session)
        fsm.sync_phase_to_model()
        save_game(r=r, state=state)
        record_score(r=r, score=state.score)

        if undone:
            entries = _events_for_undo(state=state)
        ids = publish_many(r=r, entries=entries)

        return ActionResult(state=state, outcome=outcome, undone=undone, event_ids=ids)


def hint_for_game(*, r: redis.Redis, game_id: UUID, tie_break: TieBreak = TieBreak.last) -> Direction | None:
    """Read-only: suggest a direction for the stored position."""

    state = require_game(r=r, game_id=game_id)
    return session_from_state(state).suggest(tie_break=tie_break)
