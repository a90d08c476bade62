"""Geometry helpers for tile coordinates, rasterized lines, and angles."""

from __future__ import annotations

import math
from enum import Enum
from typing import List, NamedTuple, Sequence, Tuple

Coord = Tuple[int, int]
Point = Tuple[float, float]


class Direction(Enum):
    """Cardinal directions with unit vectors on the tile grid."""

    NORTH = (0, -1)
    EAST = (1, 0)
    SOUTH = (0, 1)
    WEST = (-1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value


CARDINAL_OFFSETS: Tuple[Coord, ...] = tuple(direction.vector for direction in Direction)

# Moore neighborhood in clockwise order (screen coordinates, y grows downward),
# starting from the western neighbor.
MOORE_OFFSETS: Tuple[Coord, ...] = (
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
)


class TilePos(NamedTuple):
    """Integer tile coordinate."""

    x: int
    y: int

    def to_tuple(self) -> Coord:
        return self.x, self.y

    @classmethod
    def from_tuple(cls, value: Sequence[int]) -> TilePos:
        if len(value) != 2:
            raise ValueError(f"TilePos needs exactly two coordinates, got {value!r}")
        return cls(int(value[0]), int(value[1]))


def round_point(point: Point) -> Coord:
    """Snap a float coordinate to the nearest tile (halves round up)."""
    return int(math.floor(point[0] + 0.5)), int(math.floor(point[1] + 0.5))


def squared_distance(a: Sequence[float], b: Sequence[float]) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def line_cells(start: Sequence[int], end: Sequence[int]) -> List[Coord]:
    """Rasterize a 4-connected Bresenham line from ``start`` to ``end`` (inclusive).

    Whenever plain Bresenham would take a diagonal step, the x step and the y
    step are emitted as two separate cells so that consecutive cells always
    share an edge. Carving the result therefore joins regions under
    4-connectivity.
    """
    x0, y0 = int(start[0]), int(start[1])
    x1, y1 = int(end[0]), int(end[1])
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    cells: List[Coord] = [(x0, y0)]
    while (x0, y0) != (x1, y1):
        e2 = 2 * err
        step_x = e2 >= dy
        step_y = e2 <= dx
        if step_x:
            err += dy
            x0 += sx
            cells.append((x0, y0))
        if step_y:
            err += dx
            y0 += sy
            cells.append((x0, y0))
    return cells


def disc_offsets(radius: int) -> List[Coord]:
    """Offsets covered by a filled disc brush of ``radius`` (0 is a single cell)."""
    if radius < 0:
        raise ValueError("Brush radius cannot be negative")
    r2 = radius * radius
    return [
        (dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if dx * dx + dy * dy <= r2
    ]


def angle_between(origin: Point, target: Point) -> float:
    """Angle of ``target`` seen from ``origin`` in radians, normalized to [0, 2*pi)."""
    angle = math.atan2(target[1] - origin[1], target[0] - origin[0])
    if angle < 0.0:
        angle += 2.0 * math.pi
    return angle


def sector_index(angle: float, sectors: int) -> int:
    """Return which of ``sectors`` equal slices around the circle holds ``angle``."""
    if sectors <= 0:
        raise ValueError("Sector count must be positive")
    width = 2.0 * math.pi / sectors
    return min(sectors - 1, max(0, int(angle // width)))
