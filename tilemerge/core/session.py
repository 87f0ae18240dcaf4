from __future__ import annotations

import random
from dataclasses import dataclass

from tilemerge.core.advisor import TieBreak, suggest
from tilemerge.core.grid import Direction, Grid, parse_direction, validate_size
from tilemerge.core.history import HistoryStack, Snapshot
from tilemerge.core.spawner import SpawnedTile, spawn
from tilemerge.core.terminal import has_moves
from tilemerge.core.transform import transform


INITIAL_TILES = 2


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    """What a move did, for renderers.

    `spawned` lists the tiles dropped after a successful move so a UI can
    animate them; it is empty when `moved` is False.
    """

    moved: bool
    gained: int
    spawned: tuple[SpawnedTile, ...]
    game_over: bool
    score: int


class GameSession:
    """One player's board, score and undo history.

    The session is the only owner of its grid. Randomness comes from `rng` so a
    seeded generator makes a game reproducible.
    """

    def __init__(
        self,
        grid: Grid,
        score: int = 0,
        *,
        history: HistoryStack | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if score < 0:
            raise ValueError("Score must be non-negative")
        self.grid = grid
        self.score = score
        self.history = history if history is not None else HistoryStack()
        self.rng = rng if rng is not None else random.Random()
        # Tiles placed by `new`, kept so the first render can animate them.
        self.initial_spawn: tuple[SpawnedTile, ...] = ()

    @classmethod
    def new(cls, size: int, *, rng: random.Random | None = None) -> "GameSession":
        validate_size(size)
        session = cls(Grid.empty(size), rng=rng)
        session.initial_spawn = tuple(spawn(session.grid, INITIAL_TILES, rng=session.rng))
        return session

    @property
    def size(self) -> int:
        return self.grid.size

    @property
    def game_over(self) -> bool:
        return not has_moves(self.grid)

    def apply_move(self, direction: Direction | str) -> MoveOutcome:
        d = parse_direction(direction)
        result = transform(self.grid, d)

        if not result.changed:
            return MoveOutcome(moved=False, gained=0, spawned=(), game_over=self.game_over, score=self.score)

        self.history.push(Snapshot.of(self.grid, self.score))
        self.grid = result.grid
        self.score += result.score_gained
        spawned = tuple(spawn(self.grid, 1, rng=self.rng))

        return MoveOutcome(
            moved=True,
            gained=result.score_gained,
            spawned=spawned,
            game_over=self.game_over,
            score=self.score,
        )

    def undo(self) -> Snapshot | None:
        snapshot = self.history.pop()
        if snapshot is None:
            return None
        self.grid = snapshot.to_grid()
        self.score = snapshot.score
        return snapshot

    def suggest(self, *, tie_break: TieBreak = TieBreak.last) -> Direction | None:
        return suggest(self.grid, tie_break=tie_break)
