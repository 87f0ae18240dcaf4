from __future__ import annotations

from enum import StrEnum

from tilemerge.core.grid import DIRECTIONS, Direction, Grid
from tilemerge.core.transform import transform


class TieBreak(StrEnum):
    """Which direction wins when several share the maximal gain.

    Directions are evaluated left, right, up, down.
    - `last`: the last evaluated direction with the maximal gain wins (`>=`).
    - `first`: the first evaluated direction with the maximal gain wins (`>`).
    """

    last = "last"
    first = "first"


def suggest(grid: Grid, *, tie_break: TieBreak = TieBreak.last) -> Direction | None:
    """Greedy hint: the changing direction with the largest immediate score gain.

    Every probe runs on a copy; the caller's grid is left untouched.
    """

    best: Direction | None = None
    best_gain = -1

    for d in DIRECTIONS:
        result = transform(grid.copy(), d)
        if not result.changed:
            continue
        gain = result.score_gained
        better = gain >= best_gain if tie_break == TieBreak.last else gain > best_gain
        if better:
            best, best_gain = d, gain

    return best
