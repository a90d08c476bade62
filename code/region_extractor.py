"""Connected-component labeling of passable tiles into bridgeable regions."""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from seam_constants import BLOCKED_LABEL, DROPPED_LABEL
from seam_geometry import CARDINAL_OFFSETS, MOORE_OFFSETS, Coord, Point
from seam_grid import PassabilityGrid
from seam_models import Region, RegionMap

logger = logging.getLogger(__name__)


def passability_mask(grid: PassabilityGrid) -> np.ndarray:
    """Snapshot the grid into a boolean array indexed ``[y, x]``."""
    mask = np.zeros((grid.height, grid.width), dtype=bool)
    for y in range(grid.height):
        for x in range(grid.width):
            mask[y, x] = bool(grid.is_passable(x, y))
    return mask


def flood_component(mask: np.ndarray, visited: np.ndarray, start: Coord) -> List[Coord]:
    """Collect the 4-connected passable component containing ``start``.

    Uses an explicit queue so arbitrarily large components never hit the
    recursion limit. Marks every collected tile in ``visited``.
    """
    height, width = mask.shape
    sx, sy = start
    visited[sy, sx] = True
    queue = deque([start])
    cells: List[Coord] = []
    while queue:
        cx, cy = queue.popleft()
        cells.append((cx, cy))
        for dx, dy in CARDINAL_OFFSETS:
            nx, ny = cx + dx, cy + dy
            if 0 <= nx < width and 0 <= ny < height and mask[ny, nx] and not visited[ny, nx]:
                visited[ny, nx] = True
                queue.append((nx, ny))
    return cells


def label_components(mask: np.ndarray) -> List[List[Coord]]:
    """Return every passable component, discovered in row-major order."""
    height, width = mask.shape
    visited = np.zeros_like(mask, dtype=bool)
    components: List[List[Coord]] = []
    for y in range(height):
        for x in range(width):
            if mask[y, x] and not visited[y, x]:
                components.append(flood_component(mask, visited, (x, y)))
    return components


def compute_centroid(cells: Sequence[Coord]) -> Point:
    coords = np.asarray(cells, dtype=float)
    mean = coords.mean(axis=0)
    return float(mean[0]), float(mean[1])


def boundary_cells(members: Set[Coord]) -> Set[Coord]:
    """Member tiles with at least one non-member among their eight neighbors."""
    return {
        (x, y)
        for x, y in members
        if any((x + dx, y + dy) not in members for dx, dy in MOORE_OFFSETS)
    }


def _moore_trace(start: Coord, members: Set[Coord]) -> List[Coord]:
    """Walk the outer contour clockwise using Moore-neighbor tracing.

    ``start`` must be the topmost-leftmost member so that its western
    neighbor is guaranteed to lie outside the region. The walk stops as soon
    as a (tile, backtrack) state repeats.
    """
    walk = [start]
    current = start
    backtrack = 0  # Index into MOORE_OFFSETS of the last outside tile examined.
    seen = {(start, backtrack)}
    while True:
        for step in range(1, 9):
            direction = (backtrack + step) % 8
            dx, dy = MOORE_OFFSETS[direction]
            candidate = (current[0] + dx, current[1] + dy)
            if candidate in members:
                break
        else:
            return walk  # Isolated single tile.
        pdx, pdy = MOORE_OFFSETS[(direction - 1) % 8]
        outside = (current[0] + pdx, current[1] + pdy)
        backtrack = MOORE_OFFSETS.index((outside[0] - candidate[0], outside[1] - candidate[1]))
        state = (candidate, backtrack)
        if state in seen:
            return walk
        seen.add(state)
        walk.append(candidate)
        current = candidate


def _chain_cells(cells: Iterable[Coord]) -> List[Coord]:
    """Order leftover boundary tiles (hole rims) by hopping between neighbors."""
    pending = set(cells)
    ordered: List[Coord] = []
    current: Optional[Coord] = None
    while pending:
        following = None
        if current is not None:
            for dx, dy in MOORE_OFFSETS:
                neighbor = (current[0] + dx, current[1] + dy)
                if neighbor in pending:
                    following = neighbor
                    break
        if following is None:
            following = min(pending, key=lambda cell: (cell[1], cell[0]))
        pending.remove(following)
        ordered.append(following)
        current = following
    return ordered


def trace_perimeter(cells: Sequence[Coord]) -> Tuple[Coord, ...]:
    """Return the region's boundary tiles ordered as a clockwise walk.

    The outer contour comes first; rims of interior holes follow, each
    chained so consecutive entries stay geometrically adjacent where possible.
    """
    members = set(cells)
    boundary = boundary_cells(members)
    if not boundary:
        return ()
    start = min(boundary, key=lambda cell: (cell[1], cell[0]))
    ordered = list(dict.fromkeys(_moore_trace(start, members)))
    remaining = boundary.difference(ordered)
    if remaining:
        ordered.extend(_chain_cells(remaining))
    return tuple(ordered)


def extract_regions(
    grid: PassabilityGrid,
    min_area_ratio: float = 0.0,
    keep_points: Iterable[Coord] = (),
) -> RegionMap:
    """Label the grid's passable tiles and build the bridgeable regions.

    Components smaller than ``min_area_ratio`` of the total passable area are
    dropped (labelled ``DROPPED_LABEL``) unless they contain one of
    ``keep_points``. Surviving regions are numbered in row-major discovery
    order. The grid is only read.
    """
    mask = passability_mask(grid)
    components = label_components(mask)
    total_passable = sum(len(component) for component in components)
    labels = np.full(mask.shape, BLOCKED_LABEL, dtype=np.int32)

    protected: Set[Coord] = {
        (int(x), int(y))
        for x, y in keep_points
        if 0 <= x < grid.width and 0 <= y < grid.height
    }
    min_area = min_area_ratio * total_passable

    regions: List[Region] = []
    dropped_cells = 0
    for component in components:
        keep = len(component) >= min_area or any(cell in protected for cell in component)
        if not keep:
            dropped_cells += len(component)
            for x, y in component:
                labels[y, x] = DROPPED_LABEL
            continue
        index = len(regions)
        for x, y in component:
            labels[y, x] = index
        regions.append(
            Region(
                index=index,
                cells=tuple(component),
                centroid=compute_centroid(component),
                weight=len(component) / total_passable,
                perimeter=trace_perimeter(component),
            )
        )

    logger.debug(
        "Extracted %d regions from %d components (%d passable tiles, %d dropped)",
        len(regions),
        len(components),
        total_passable,
        dropped_cells,
    )
    return RegionMap(
        labels=labels,
        regions=tuple(regions),
        total_passable=total_passable,
        dropped_cells=dropped_cells,
    )
