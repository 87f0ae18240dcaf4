from __future__ import annotations

import random
from dataclasses import dataclass

from tilemerge.core.grid import Grid


SPAWN_TWO_PROBABILITY = 0.9


@dataclass(frozen=True, slots=True)
class SpawnedTile:
    index: int
    value: int
    size: int

    @property
    def row(self) -> int:
        return self.index // self.size

    @property
    def col(self) -> int:
        return self.index % self.size


def spawn(grid: Grid, count: int = 1, *, rng: random.Random) -> list[SpawnedTile]:
    """Drop `count` new tiles into random empty cells, in place.

    Stops early (without error) once the board is full.
    """

    spawned: list[SpawnedTile] = []
    for _ in range(count):
        empties = grid.empty_cells()
        if not empties:
            break
        idx = rng.choice(empties)
        value = 2 if rng.random() < SPAWN_TWO_PROBABILITY else 4
        grid.cells[idx] = value
        spawned.append(SpawnedTile(index=idx, value=value, size=grid.size))
    return spawned
