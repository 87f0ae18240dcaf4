from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable

from tilemerge.core.grid import Grid


HISTORY_CAPACITY = 50


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Frozen grid+score taken before a state-changing move."""

    size: int
    cells: tuple[int, ...]
    score: int

    @staticmethod
    def of(grid: Grid, score: int) -> "Snapshot":
        return Snapshot(size=grid.size, cells=tuple(grid.cells), score=score)

    def to_grid(self) -> Grid:
        # Always a new list, so callers can mutate the restored grid freely.
        return Grid(size=self.size, cells=list(self.cells))


class HistoryStack:
    """Bounded undo stack.

    Contract:
      - `push` appends; past `capacity` the oldest snapshot is dropped.
      - `pop` returns the newest snapshot, or None when empty.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY, entries: Iterable[Snapshot] = ()) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be positive")
        self._entries: deque[Snapshot] = deque(entries, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def push(self, snapshot: Snapshot) -> None:
        self._entries.append(snapshot)

    def pop(self) -> Snapshot | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self) -> None:
        self._entries.clear()

    def snapshots(self) -> list[Snapshot]:
        """Oldest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
