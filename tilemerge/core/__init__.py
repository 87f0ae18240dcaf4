"""Core puzzle primitives (grid, move transform, spawning, undo history, hints).

Kept free of FastAPI and Redis concerns so it can be reused by API routes, CLI, and tests.
"""

from tilemerge.core.advisor import TieBreak, suggest
from tilemerge.core.grid import DIRECTIONS, Direction, Grid, parse_direction
from tilemerge.core.history import HISTORY_CAPACITY, HistoryStack, Snapshot
from tilemerge.core.session import GameSession, MoveOutcome
from tilemerge.core.spawner import SpawnedTile, spawn
from tilemerge.core.terminal import has_moves, is_game_over
from tilemerge.core.transform import MoveResult, merge_line, transform

__all__ = [
    "DIRECTIONS",
    "Direction",
    "GameSession",
    "Grid",
    "HISTORY_CAPACITY",
    "HistoryStack",
    "MoveOutcome",
    "MoveResult",
    "Snapshot",
    "SpawnedTile",
    "TieBreak",
    "has_moves",
    "is_game_over",
    "merge_line",
    "parse_direction",
    "spawn",
    "suggest",
    "transform",
]
