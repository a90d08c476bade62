"""Applies selected tunnels to a passability grid."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from seam_geometry import Coord, disc_offsets, line_cells
from seam_grid import PassabilityGrid
from seam_models import TunnelSegment

logger = logging.getLogger(__name__)


def brush_cells(path: Sequence[Coord], radius: int, width: int, height: int) -> List[Coord]:
    """Tiles covered by sweeping a disc of ``radius`` along ``path``, clipped to the grid."""
    if radius == 0:
        return [cell for cell in path if 0 <= cell[0] < width and 0 <= cell[1] < height]
    offsets = disc_offsets(radius)
    seen = set()
    cells: List[Coord] = []
    for x, y in path:
        for dx, dy in offsets:
            cell = (x + dx, y + dy)
            if cell in seen or not (0 <= cell[0] < width and 0 <= cell[1] < height):
                continue
            seen.add(cell)
            cells.append(cell)
    return cells


def carve_path(grid: PassabilityGrid, path: Sequence[Coord], radius: int = 0) -> int:
    """Open every blocked tile under the brush; returns how many tiles changed."""
    carved = 0
    for x, y in brush_cells(path, radius, grid.width, grid.height):
        if not grid.is_passable(x, y):
            grid.set_passable(x, y)
            carved += 1
    return carved


def carve_tunnels(grid: PassabilityGrid, tunnels: Iterable[TunnelSegment], radius: int = 0) -> int:
    """Carve each tunnel in order. Re-carving an open tunnel changes nothing."""
    if radius < 0:
        raise ValueError("Carve radius cannot be negative")
    total = 0
    for tunnel in tunnels:
        path = tunnel.cells or tuple(line_cells(tunnel.from_point, tunnel.to_point))
        carved = carve_path(grid, path, radius)
        logger.debug(
            "Carved tunnel %d->%d: %d tiles opened",
            tunnel.from_region,
            tunnel.to_region,
            carved,
        )
        total += carved
    return total
