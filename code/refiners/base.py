from __future__ import annotations

from dataclasses import dataclass

from seam_geometry import Coord
from seam_models import Region, RegionMap


@dataclass(frozen=True)
class EndpointPair:
    """Proposed tunnel mouths for one region pair and the tunnel's cost."""

    point_a: Coord
    point_b: Coord
    cost: int


@dataclass(frozen=True)
class PairContext:
    """Read-only view of the two regions being bridged."""

    region_map: RegionMap
    region_a: Region
    region_b: Region

    def cost(self, point_a: Coord, point_b: Coord) -> int:
        return self.region_map.segment_cost(point_a, point_b)

    def pair(self, point_a: Coord, point_b: Coord) -> EndpointPair:
        return EndpointPair(tuple(point_a), tuple(point_b), self.cost(point_a, point_b))


class EndpointRefiner:
    """Search for tunnel mouths cheaper than a known pair.

    Implementations must return ``current`` (or an equally cheap pair) when
    they find nothing better, so chaining refiners never raises the cost.
    """

    name = "refiner"

    def refine(self, context: PairContext, current: EndpointPair) -> EndpointPair:
        raise NotImplementedError
