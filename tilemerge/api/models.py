from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from tilemerge.core import Direction, SpawnedTile, TieBreak


MAX_GRID_SIZE = 8


class GameCreateRequest(BaseModel):
    # Falls back to the stored preferred size when omitted.
    size: int | None = Field(default=None, ge=2, le=MAX_GRID_SIZE)
    seed: int | None = Field(default=None, ge=0)


class MoveRequest(BaseModel):
    direction: Direction


class HistoryEntry(BaseModel):
    cells: list[int]
    score: int = Field(..., ge=0)


class GamePhase(StrEnum):
    playing = "playing"
    over = "over"


class GameState(BaseModel):
    game_id: UUID
    size: int
    created_at: datetime
    last_updated_at: datetime

    # For reproducibility/debugging. Spawns use a generator derived from (seed, turn).
    seed: int
    turn: int = 0

    grid: list[int]
    score: int = Field(default=0, ge=0)
    phase: GamePhase = GamePhase.playing

    # Undo stack, oldest first.
    history: list[HistoryEntry] = Field(default_factory=list)


class SpawnedTileModel(BaseModel):
    index: int
    row: int
    col: int
    value: int

    @staticmethod
    def from_tile(tile: SpawnedTile) -> "SpawnedTileModel":
        return SpawnedTileModel(index=tile.index, row=tile.row, col=tile.col, value=tile.value)


class MoveResponse(BaseModel):
    state: GameState
    moved: bool
    gained: int
    spawned: list[SpawnedTileModel] = Field(default_factory=list)
    game_over: bool


class UndoResponse(BaseModel):
    state: GameState
    undone: bool


class HintResponse(BaseModel):
    game_id: UUID
    direction: Direction | None
    tie_break: TieBreak


class BestScoreResponse(BaseModel):
    best_score: int
    size: int


class GameListResponse(BaseModel):
    games: list[GameState]
