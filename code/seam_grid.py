"""Passability grid abstraction consumed and mutated by the bridging engine."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, runtime_checkable

from seam_geometry import Coord

FLOOR_CHAR = "."
WALL_CHAR = "#"


@runtime_checkable
class PassabilityGrid(Protocol):
    """
    The only capability the engine needs from a terrain grid.
    Any object exposing these members can be analyzed; carving additionally
    needs ``set_passable``.
    """

    width: int
    height: int

    def is_passable(self, x: int, y: int) -> bool:
        ...

    def set_passable(self, x: int, y: int) -> None:
        ...

    def find_first_passable(self) -> Optional[Coord]:
        """First passable tile in row-major order; roots the tree when no spawn is given."""
        ...


class TileGrid:
    """Row-major boolean grid where True marks a passable (floor) tile."""

    def __init__(self, width: int, height: int, *, fill: bool = False) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid grid dimensions: {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[bool]] = [[fill for _ in range(width)] for _ in range(height)]

    @classmethod
    def from_strings(cls, rows: Sequence[str], floor: str = FLOOR_CHAR) -> TileGrid:
        """Build a grid from ASCII rows; any character other than ``floor`` is a wall."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
            for x, char in enumerate(row):
                grid._cells[y][x] = char in floor
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_passable(self, x: int, y: int) -> bool:
        """Out-of-bounds coordinates read as blocked."""
        if not self.in_bounds(x, y):
            return False
        return self._cells[y][x]

    def set_passable(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile {(x, y)} is outside the {self.width}x{self.height} grid")
        self._cells[y][x] = True

    def fill_rect(self, x: int, y: int, width: int, height: int, passable: bool = True) -> None:
        """Set every in-bounds tile of the rectangle; tiles outside the grid are skipped."""
        for ty in range(max(0, y), min(self.height, y + height)):
            row = self._cells[ty]
            for tx in range(max(0, x), min(self.width, x + width)):
                row[tx] = passable

    def iter_passable(self) -> Iterator[Coord]:
        """Yield passable tiles in row-major order."""
        for y, row in enumerate(self._cells):
            for x, passable in enumerate(row):
                if passable:
                    yield x, y

    def count_passable(self) -> int:
        return sum(sum(1 for passable in row if passable) for row in self._cells)

    def find_first_passable(self) -> Optional[Coord]:
        return next(self.iter_passable(), None)

    def copy(self) -> TileGrid:
        clone = TileGrid(self.width, self.height)
        clone._cells = [list(row) for row in self._cells]
        return clone

    def to_strings(self, floor: str = FLOOR_CHAR, wall: str = WALL_CHAR) -> List[str]:
        return ["".join(floor if passable else wall for passable in row) for row in self._cells]

    def render(self, marks: Optional[Iterable[Coord]] = None, mark: str = "+") -> str:
        """Return an ASCII picture of the grid, optionally highlighting ``marks``."""
        rows = [list(row) for row in self.to_strings()]
        for x, y in marks or ():
            if self.in_bounds(x, y):
                rows[y][x] = mark
        return "\n".join("".join(row) for row in rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._cells == other._cells
        )

    def __repr__(self) -> str:
        return f"TileGrid({self.width}x{self.height}, passable={self.count_passable()})"
