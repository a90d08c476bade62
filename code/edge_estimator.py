"""Tunnel cost estimation between pairs of regions."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from seam_config import BridgingConfig
from seam_geometry import Coord, line_cells, round_point, squared_distance
from seam_models import Edge, Region, RegionMap
from refiners import EndpointRefiner, FrustumRays, PairContext, PerimeterDescent

logger = logging.getLogger(__name__)


def nearest_perimeter_point(region: Region, target: Sequence[float]) -> Coord:
    """Boundary tile of ``region`` closest to ``target``; earliest in walk order on ties."""
    best = region.perimeter[0]
    best_dist = squared_distance(best, target)
    for cell in region.perimeter[1:]:
        dist = squared_distance(cell, target)
        if dist < best_dist:
            best, best_dist = cell, dist
    return best


def baseline_endpoints(region_a: Region, region_b: Region) -> Tuple[Coord, Coord]:
    """Exit points found by walking the straight line between the two centroids.

    The exit of A is the last tile on the line still inside A; the exit of B
    is the first tile of B after it. When the line misses a region entirely
    (concave shapes, coincident centroids) that side falls back to its
    boundary tile nearest the other centroid.
    """
    start = round_point(region_a.centroid)
    end = round_point(region_b.centroid)
    exit_a: Optional[Coord] = None
    exit_b: Optional[Coord] = None
    if start != end:
        line = line_cells(start, end)
        index_a = None
        for idx, cell in enumerate(line):
            if region_a.contains(cell):
                index_a = idx
        if index_a is not None:
            exit_a = line[index_a]
            exit_b = next((cell for cell in line[index_a + 1:] if region_b.contains(cell)), None)
        if exit_b is None:
            exit_b = next((cell for cell in line if region_b.contains(cell)), None)
    if exit_a is None:
        exit_a = nearest_perimeter_point(region_a, region_b.centroid)
    if exit_b is None:
        exit_b = nearest_perimeter_point(region_b, region_a.centroid)
    return exit_a, exit_b


def centroid_distance(region_a: Region, region_b: Region) -> float:
    return math.sqrt(squared_distance(region_a.centroid, region_b.centroid))


def candidate_pairs(regions: Sequence[Region], max_edge_distance: float = 0.0) -> List[Tuple[int, int]]:
    """Unordered region pairs worth estimating, in lexicographic order."""
    pairs: List[Tuple[int, int]] = []
    for idx, region_a in enumerate(regions):
        for region_b in regions[idx + 1:]:
            if max_edge_distance > 0 and centroid_distance(region_a, region_b) > max_edge_distance:
                continue
            pairs.append((region_a.index, region_b.index))
    return pairs


def build_refiners(config: BridgingConfig) -> List[EndpointRefiner]:
    """Global search first, then local polishing of whatever pair it settles on."""
    refiners: List[EndpointRefiner] = []
    if config.use_frr:
        refiners.append(
            FrustumRays(
                half_angle=config.frr_half_angle,
                bins=config.frr_bins,
                levels=config.frr_levels,
            )
        )
    if config.use_pgd:
        refiners.append(
            PerimeterDescent(
                n_skew=config.n_skew,
                max_iterations=config.max_pgd_iterations,
            )
        )
    return refiners


class EdgeCostEstimator:
    """Produces one candidate edge per region pair."""

    def __init__(self, config: Optional[BridgingConfig] = None) -> None:
        self.config = config or BridgingConfig()
        self.refiners = build_refiners(self.config)

    def estimate_pair(self, region_map: RegionMap, a: int, b: int) -> Edge:
        context = self._context(region_map, a, b)
        point_a, point_b = baseline_endpoints(context.region_a, context.region_b)
        baseline = context.pair(point_a, point_b)
        best = baseline
        for refiner in self.refiners:
            refined = refiner.refine(context, best)
            if refined.cost <= best.cost:
                best = refined
        return Edge(
            a=a,
            b=b,
            cost=best.cost,
            point_a=best.point_a,
            point_b=best.point_b,
            baseline_cost=baseline.cost,
        )

    def estimate(self, region_map: RegionMap, pairs: Optional[Sequence[Tuple[int, int]]] = None) -> List[Edge]:
        """Estimate every requested pair; defaults to all pairs within ``max_edge_distance``."""
        if pairs is None:
            pairs = candidate_pairs(region_map.regions, self.config.max_edge_distance)
        workers = self.config.max_workers
        if workers > 1 and len(pairs) > 1:
            # Pairs are independent; map() keeps results in submission order.
            with ThreadPoolExecutor(max_workers=workers) as executor:
                edges = list(executor.map(lambda pair: self.estimate_pair(region_map, *pair), pairs))
        else:
            edges = [self.estimate_pair(region_map, a, b) for a, b in pairs]
        refined = sum(1 for edge in edges if edge.cost < edge.baseline_cost)
        logger.debug(
            "Estimated %d edges (%d improved by %s)",
            len(edges),
            refined,
            "+".join(refiner.name for refiner in self.refiners) or "no refinement",
        )
        return edges

    @staticmethod
    def _context(region_map: RegionMap, a: int, b: int) -> PairContext:
        return PairContext(
            region_map=region_map,
            region_a=region_map.regions[a],
            region_b=region_map.regions[b],
        )


def estimate_edges(region_map: RegionMap, config: Optional[BridgingConfig] = None) -> List[Edge]:
    return EdgeCostEstimator(config).estimate(region_map)
