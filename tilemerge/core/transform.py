from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from tilemerge.core.grid import Direction, Grid, parse_direction


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Outcome of sliding a grid in one direction.

    - `grid`: a fresh grid; the input is never touched.
    - `changed`: whether any cell differs from the input.
    - `score_gained`: sum of the tiles produced by merges.
    """

    grid: Grid
    changed: bool
    score_gained: int


def merge_line(values: Sequence[int]) -> tuple[list[int], int]:
    """Slide one line towards index 0 and merge equal neighbours.

    Each tile merges at most once per move: `[2, 2, 2, 2]` becomes
    `[4, 4, 0, 0]`, never `[8, 0, 0, 0]`.
    """

    tiles = [v for v in values if v]
    merged: list[int] = []
    gained = 0

    k = 0
    while k < len(tiles):
        if k + 1 < len(tiles) and tiles[k] == tiles[k + 1]:
            doubled = tiles[k] * 2
            merged.append(doubled)
            gained += doubled
            k += 2
        else:
            merged.append(tiles[k])
            k += 1

    merged.extend([0] * (len(values) - len(merged)))
    return merged, gained


def line_indices(size: int, direction: Direction, line: int) -> list[int]:
    """Cell indices of one row/column, listed in travel order."""

    if direction in (Direction.left, Direction.right):
        indices = [line * size + c for c in range(size)]
    else:
        indices = [r * size + line for r in range(size)]

    if direction in (Direction.right, Direction.down):
        indices.reverse()
    return indices


def transform(grid: Grid, direction: Direction | str) -> MoveResult:
    d = parse_direction(direction)
    size = grid.size

    cells = list(grid.cells)
    changed = False
    gained = 0

    for line in range(size):
        indices = line_indices(size, d, line)
        result, line_gain = merge_line([grid.cells[i] for i in indices])
        gained += line_gain
        for i, v in zip(indices, result):
            if cells[i] != v:
                changed = True
            cells[i] = v

    return MoveResult(grid=Grid(size=size, cells=cells), changed=changed, score_gained=gained)
