from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Sequence


MIN_SIZE = 2


class Direction(StrEnum):
    left = "left"
    right = "right"
    up = "up"
    down = "down"


# Evaluation order used wherever all directions are probed.
DIRECTIONS: tuple[Direction, ...] = (Direction.left, Direction.right, Direction.up, Direction.down)


def parse_direction(value: Direction | str) -> Direction:
    try:
        return Direction(value)
    except ValueError:
        allowed = ", ".join(d.value for d in DIRECTIONS)
        raise ValueError(f"Invalid direction: {value!r} (allowed: {allowed})") from None


def _is_tile_value(v: int) -> bool:
    # 0 (empty) or a power of two >= 2.
    return v == 0 or (v >= 2 and v & (v - 1) == 0)


def validate_size(size: int) -> int:
    if size < MIN_SIZE:
        raise ValueError(f"Grid size must be at least {MIN_SIZE}, got {size}")
    return size


@dataclass(slots=True)
class Grid:
    """Square board stored row-major; 0 marks an empty cell."""

    size: int
    cells: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_size(self.size)
        if not self.cells:
            self.cells = [0] * (self.size * self.size)
        if len(self.cells) != self.size * self.size:
            raise ValueError(f"Expected {self.size * self.size} cells for size {self.size}, got {len(self.cells)}")
        bad = [v for v in self.cells if not _is_tile_value(v)]
        if bad:
            raise ValueError(f"Invalid tile value(s): {bad[:5]}")

    @classmethod
    def empty(cls, size: int) -> "Grid":
        return cls(size=size)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Grid":
        size = len(rows)
        if any(len(row) != size for row in rows):
            raise ValueError("Grid rows must form a square")
        return cls(size=size, cells=[v for row in rows for v in row])

    def index(self, row: int, col: int) -> int:
        return row * self.size + col

    def __getitem__(self, pos: tuple[int, int]) -> int:
        row, col = pos
        return self.cells[self.index(row, col)]

    def empty_cells(self) -> list[int]:
        return [i for i, v in enumerate(self.cells) if v == 0]

    def is_full(self) -> bool:
        return 0 not in self.cells

    def copy(self) -> "Grid":
        return Grid(size=self.size, cells=list(self.cells))

    def rows(self) -> list[list[int]]:
        n = self.size
        return [self.cells[r * n : (r + 1) * n] for r in range(n)]

    def total(self) -> int:
        return sum(self.cells)

    def max_tile(self) -> int:
        return max(self.cells)

    def render(self) -> str:
        """Plain-text board, one row per line, dots for empty cells."""

        width = max(len(str(self.max_tile())), 1)
        return "\n".join(
            " ".join(f"{v:>{width}}" if v else f"{'.':>{width}}" for v in row) for row in self.rows()
        )
