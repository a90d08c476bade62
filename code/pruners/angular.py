from __future__ import annotations

from typing import Dict, List, Sequence, Set, Tuple

from seam_constants import DEFAULT_ANGULAR_SECTORS
from seam_geometry import angle_between, sector_index
from seam_models import Edge, Region
from pruners.base import EdgeFilter


class AngularSectorFilter(EdgeFilter):
    """Keep each region's cheapest outgoing edge per direction slice.

    An edge survives when either endpoint keeps it. Within a slice the
    winner is the lowest (cost, neighbor index).
    """

    name = "angular"

    def __init__(self, sectors: int = DEFAULT_ANGULAR_SECTORS) -> None:
        if sectors <= 0:
            raise ValueError("sectors must be positive")
        self.sectors = sectors

    def apply(self, regions: Sequence[Region], edges: Sequence[Edge]) -> List[Edge]:
        best: Dict[Tuple[int, int], Tuple[Tuple[int, int], Edge]] = {}
        for edge in edges:
            for origin in (edge.a, edge.b):
                other = edge.other(origin)
                angle = angle_between(regions[origin].centroid, regions[other].centroid)
                slot = (origin, sector_index(angle, self.sectors))
                rank = (edge.cost, other)
                current = best.get(slot)
                if current is None or rank < current[0]:
                    best[slot] = (rank, edge)
        kept: Set[Tuple[int, int]] = {edge.key for _, edge in best.values()}
        return [edge for edge in edges if edge.key in kept]

    def __repr__(self) -> str:
        return f"AngularSectorFilter(sectors={self.sectors})"
