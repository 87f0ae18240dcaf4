from __future__ import annotations

import pytest

from tilemerge.core import Direction, Grid, parse_direction


def test_empty_grid_is_zero_filled() -> None:
    g = Grid.empty(3)
    assert g.cells == [0] * 9
    assert g.empty_cells() == list(range(9))
    assert g.is_full() is False


def test_from_rows_is_row_major() -> None:
    g = Grid.from_rows([[2, 0], [4, 8]])
    assert g.cells == [2, 0, 4, 8]
    assert g[1, 0] == 4
    assert g.index(1, 1) == 3
    assert g.rows() == [[2, 0], [4, 8]]
    assert g.total() == 14
    assert g.max_tile() == 8


@pytest.mark.parametrize("cells", [[3, 0, 0, 0], [1, 0, 0, 0], [-2, 0, 0, 0], [2, 0, 0]])
def test_rejects_malformed_cells(cells: list[int]) -> None:
    with pytest.raises(ValueError):
        Grid(size=2, cells=cells)


def test_rejects_non_square_rows() -> None:
    with pytest.raises(ValueError):
        Grid.from_rows([[2, 0], [0]])


def test_rejects_size_below_two() -> None:
    with pytest.raises(ValueError):
        Grid.empty(1)


def test_copy_is_independent() -> None:
    g = Grid.from_rows([[2, 0], [0, 0]])
    c = g.copy()
    c.cells[1] = 4
    assert g.cells == [2, 0, 0, 0]


def test_render() -> None:
    g = Grid.from_rows([[2, 0], [128, 4]])
    assert g.render() == "  2   .\n128   4"


@pytest.mark.parametrize("raw", ["left", "right", "up", "down", Direction.down])
def test_parse_direction_accepts_names(raw: str) -> None:
    assert parse_direction(raw) == Direction(raw)


@pytest.mark.parametrize("raw", ["north", "LEFT", " up ", "", None])
def test_parse_direction_rejects_unknown(raw: str | None) -> None:
    with pytest.raises(ValueError) as e:
        parse_direction(raw)  # type: ignore[arg-type]
    assert "left, right, up, down" in str(e.value)
