from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from tilemerge.actions import ActionResult, dispatch_action, hint_for_game
from tilemerge.api.deps import get_redis
from tilemerge.api.models import (
    BestScoreResponse,
    GameCreateRequest,
    GameListResponse,
    GameState,
    HintResponse,
    MoveRequest,
    MoveResponse,
    SpawnedTileModel,
    UndoResponse,
)
from tilemerge.core import TieBreak
from tilemerge.game_store import (
    GameNotFoundError,
    create_game,
    get_best_score,
    get_game,
    get_preferred_size,
    list_games,
)
from tilemerge.lock import GameBusyError
from tilemerge.websocket_hub import hub

router = APIRouter()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, GameNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, GameBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _update_payload(result: ActionResult) -> dict[str, object]:
    state = result.state
    payload: dict[str, object] = {
        "type": "game_updated",
        "game_id": str(state.game_id),
        "score": state.score,
        "phase": state.phase.value,
    }
    if result.outcome is not None:
        payload["moved"] = result.outcome.moved
        payload["spawned"] = [SpawnedTileModel.from_tile(t).model_dump() for t in result.outcome.spawned]
        payload["game_over"] = result.outcome.game_over
    else:
        payload["undone"] = result.undone
    return payload


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: UUID) -> None:
    gid = str(game_id)
    await hub.connect(gid, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(gid, websocket)
    except Exception:
        await hub.disconnect(gid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/game", response_model=GameState, status_code=status.HTTP_201_CREATED)
async def create_game_route(payload: GameCreateRequest, r: redis.Redis = Depends(get_redis)) -> GameState:
    try:
        state = create_game(r=r, size=payload.size, seed=payload.seed)
    except ValueError as e:
        raise _http_error(e) from e

    await hub.broadcast(str(state.game_id), {"type": "game_updated", "game_id": str(state.game_id)})
    return state


@router.get("/game", response_model=GameListResponse)
async def list_games_route(r: redis.Redis = Depends(get_redis)) -> GameListResponse:
    return GameListResponse(games=list_games(r=r))


@router.get("/game/{game_id}", response_model=GameState)
async def get_game_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameState:
    state = get_game(r=r, game_id=game_id)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return state


@router.post("/game/{game_id}/move", response_model=MoveResponse)
async def move_route(game_id: UUID, payload: MoveRequest, r: redis.Redis = Depends(get_redis)) -> MoveResponse:
    try:
        result = dispatch_action(r=r, game_id=game_id, action="move", payload={"direction": payload.direction.value})
    except ValueError as e:
        raise _http_error(e) from e

    await hub.broadcast(str(game_id), _update_payload(result))

    outcome = result.outcome
    assert outcome is not None
    return MoveResponse(
        state=result.state,
        moved=outcome.moved,
        gained=outcome.gained,
        spawned=[SpawnedTileModel.from_tile(t) for t in outcome.spawned],
        game_over=outcome.game_over,
    )


@router.post("/game/{game_id}/undo", response_model=UndoResponse)
async def undo_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> UndoResponse:
    try:
        result = dispatch_action(r=r, game_id=game_id, action="undo", payload={})
    except ValueError as e:
        raise _http_error(e) from e

    await hub.broadcast(str(game_id), _update_payload(result))
    return UndoResponse(state=result.state, undone=result.undone)


@router.get("/game/{game_id}/hint", response_model=HintResponse)
async def hint_route(
    game_id: UUID,
    tie_break: TieBreak = TieBreak.last,
    r: redis.Redis = Depends(get_redis),
) -> HintResponse:
    try:
        direction = hint_for_game(r=r, game_id=game_id, tie_break=tie_break)
    except ValueError as e:
        raise _http_error(e) from e
    return HintResponse(game_id=game_id, direction=direction, tie_break=tie_break)


@router.get("/scores/best", response_model=BestScoreResponse)
async def best_score_route(r: redis.Redis = Depends(get_redis)) -> BestScoreResponse:
    return BestScoreResponse(best_score=get_best_score(r=r), size=get_preferred_size(r=r))
