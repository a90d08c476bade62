from __future__ import annotations

from typing import Dict, List, Sequence

from seam_constants import DEFAULT_OCCLUSION_FACTOR
from seam_models import Edge, Region
from pruners.base import EdgeFilter


class OcclusionFilter(EdgeFilter):
    """Drop direct edges beaten by a two-hop detour through a third region.

    Edges are examined from most to least expensive and removed one at a time;
    a detour only counts while both of its edges are still present, so every
    removal leaves its endpoints connected.
    """

    name = "occlusion"

    def __init__(self, factor: float = DEFAULT_OCCLUSION_FACTOR) -> None:
        if factor < 1.0:
            raise ValueError("factor must be at least 1.0")
        self.factor = factor

    def apply(self, regions: Sequence[Region], edges: Sequence[Edge]) -> List[Edge]:
        costs: Dict[int, Dict[int, int]] = {}
        for edge in edges:
            costs.setdefault(edge.a, {})[edge.b] = edge.cost
            costs.setdefault(edge.b, {})[edge.a] = edge.cost

        removed = set()
        for edge in sorted(edges, key=lambda e: e.sort_key, reverse=True):
            i, j = edge.a, edge.b
            limit = edge.cost * self.factor
            shared = sorted(set(costs[i]).intersection(costs[j]))
            for m in shared:
                if costs[i][m] + costs[m][j] < limit:
                    del costs[i][j]
                    del costs[j][i]
                    removed.add(edge.key)
                    break
        return [edge for edge in edges if edge.key not in removed]

    def __repr__(self) -> str:
        return f"OcclusionFilter(factor={self.factor})"
