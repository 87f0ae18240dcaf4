from __future__ import annotations

from tilemerge.core.grid import Grid


def has_moves(grid: Grid) -> bool:
    """True while some direction would still change the board.

    That is the case iff a cell is empty or two axis-adjacent cells hold the
    same value.
    """

    if not grid.is_full():
        return True

    n = grid.size
    for r in range(n):
        for c in range(n):
            v = grid[r, c]
            if c + 1 < n and grid[r, c + 1] == v:
                return True
            if r + 1 < n and grid[r + 1, c] == v:
                return True
    return False


def is_game_over(grid: Grid) -> bool:
    return not has_moves(grid)
