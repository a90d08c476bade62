import math
import pytest

from seam_geometry import (
    CARDINAL_OFFSETS,
    Direction,
    TilePos,
    angle_between,
    disc_offsets,
    line_cells,
    round_point,
    sector_index,
)


def test_cardinal_offsets_follow_direction_order():
    assert CARDINAL_OFFSETS == ((0, -1), (1, 0), (0, 1), (-1, 0))
    assert Direction.EAST.vector == (1, 0)


def test_tile_pos_round_trips_and_rejects_bad_length():
    assert TilePos.from_tuple((3, 4)).to_tuple() == (3, 4)

    with pytest.raises(ValueError):
        TilePos.from_tuple((1, 2, 3))


@pytest.mark.parametrize(
    "point,expected",
    [
        ((2.0, 2.0), (2, 2)),
        ((2.5, 1.5), (3, 2)),
        ((2.49, 0.2), (2, 0)),
        ((-0.5, 0.0), (0, 0)),
    ],
)
def test_round_point_snaps_halves_up(point, expected):
    assert round_point(point) == expected


def test_line_cells_straight_run_includes_both_ends():
    assert line_cells((0, 0), (3, 0)) == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert line_cells((2, 5), (2, 3)) == [(2, 5), (2, 4), (2, 3)]
    assert line_cells((1, 1), (1, 1)) == [(1, 1)]


def test_line_cells_splits_diagonal_steps():
    assert line_cells((0, 0), (2, 2)) == [(0, 0), (1, 0), (1, 1), (2, 1), (2, 2)]


@pytest.mark.parametrize(
    "start,end",
    [((0, 0), (7, 3)), ((5, 9), (1, 2)), ((3, 3), (-4, 6)), ((0, 0), (1, 8))],
)
def test_line_cells_is_four_connected(start, end):
    cells = line_cells(start, end)

    assert cells[0] == start
    assert cells[-1] == end
    for (x0, y0), (x1, y1) in zip(cells, cells[1:]):
        assert abs(x1 - x0) + abs(y1 - y0) == 1


def test_disc_offsets_sizes():
    assert disc_offsets(0) == [(0, 0)]
    assert sorted(disc_offsets(1)) == [(-1, 0), (0, -1), (0, 0), (0, 1), (1, 0)]
    assert len(disc_offsets(2)) == 13

    with pytest.raises(ValueError):
        disc_offsets(-1)


def test_angle_between_uses_screen_coordinates():
    assert angle_between((0, 0), (1, 0)) == pytest.approx(0.0)
    assert angle_between((0, 0), (0, 1)) == pytest.approx(math.pi / 2)
    assert angle_between((0, 0), (-1, 0)) == pytest.approx(math.pi)
    assert angle_between((0, 0), (0, -1)) == pytest.approx(3 * math.pi / 2)


def test_sector_index_covers_full_circle():
    assert sector_index(0.0, 6) == 0
    assert sector_index(math.pi + 0.01, 6) == 3
    assert sector_index(2 * math.pi - 1e-9, 6) == 5
    assert sector_index(2 * math.pi, 6) == 5

    with pytest.raises(ValueError):
        sector_index(0.0, 0)
