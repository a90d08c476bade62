from __future__ import annotations

import logging
from typing import List, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError

from seam_models import Edge, Region
from pruners.base import EdgeFilter

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]


def _ordered(i: int, j: int) -> Pair:
    return (i, j) if i < j else (j, i)


def collinear_pairs(points: np.ndarray) -> Set[Pair]:
    """Neighbor pairs for points on one line: consecutive points along it."""
    centered = points - points.mean(axis=0)
    _, _, vh = np.linalg.svd(centered, full_matrices=False)
    projection = centered @ vh[0]
    order = sorted(range(len(points)), key=lambda idx: (float(projection[idx]), idx))
    return {_ordered(a, b) for a, b in zip(order, order[1:])}


def delaunay_pairs(points: np.ndarray) -> Set[Pair]:
    """Index pairs joined by an edge of the Delaunay triangulation of ``points``.

    Duplicate points, which Qhull sets aside as coplanar, are joined to the
    vertex they coincide with.
    """
    count = len(points)
    if count < 2:
        return set()
    if count == 2:
        return {(0, 1)}
    centered = points - points.mean(axis=0)
    if np.linalg.matrix_rank(centered) < 2:
        return collinear_pairs(points)

    triangulation = Delaunay(points)
    pairs: Set[Pair] = set()
    for simplex in triangulation.simplices:
        a, b, c = (int(v) for v in simplex)
        pairs.update((_ordered(a, b), _ordered(b, c), _ordered(a, c)))
    for point_idx, _simplex_idx, vertex_idx in triangulation.coplanar:
        if point_idx != vertex_idx:
            pairs.add(_ordered(int(point_idx), int(vertex_idx)))
    return pairs


class DelaunayFilter(EdgeFilter):
    """Keep only edges whose regions are Delaunay neighbors by centroid."""

    name = "delaunay"

    def apply(self, regions: Sequence[Region], edges: Sequence[Edge]) -> List[Edge]:
        if len(regions) < 3:
            return list(edges)
        points = np.array([region.centroid for region in regions], dtype=float)
        try:
            neighbors = delaunay_pairs(points)
        except QhullError as exc:
            logger.debug("Delaunay triangulation failed (%s); keeping all %d edges", exc, len(edges))
            return list(edges)
        return [edge for edge in edges if edge.key in neighbors]
