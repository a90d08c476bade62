"""Top-level bridging pass: extract, estimate, prune, optimize, carve."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from time import perf_counter
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from edge_estimator import EdgeCostEstimator, candidate_pairs
from edge_pruner import EdgePruner
from graph_optimizer import GraphOptimizer, unique_terminals
from region_extractor import extract_regions
from seam_config import BridgingConfig
from seam_errors import CoverageUnmetError, DegenerateInputError
from seam_geometry import Coord, line_cells
from seam_grid import PassabilityGrid
from seam_metrics import BridgingMetrics
from seam_models import BridgingResult, CandidateGraph, Edge, RegionMap, Selection, TunnelSegment
from tunnel_carver import carve_tunnels

logger = logging.getLogger(__name__)

T = TypeVar("T")


def orient_tunnels(selection: Selection, root: int) -> List[TunnelSegment]:
    """Order the selected edges outward from ``root`` in breadth-first order.

    Tunnel cells always follow the edge's own rasterization so carving opens
    exactly the tiles its cost counted.
    """
    adjacency: Dict[int, List[Edge]] = {}
    for edge in selection.edges:
        adjacency.setdefault(edge.a, []).append(edge)
        adjacency.setdefault(edge.b, []).append(edge)

    tunnels: List[TunnelSegment] = []
    visited = {root}
    queue = deque([root])
    while queue:
        current = queue.popleft()
        for edge in sorted(adjacency.get(current, ()), key=lambda e: e.other(current)):
            neighbor = edge.other(current)
            if neighbor in visited:
                continue
            visited.add(neighbor)
            queue.append(neighbor)
            tunnels.append(
                TunnelSegment(
                    from_region=current,
                    to_region=neighbor,
                    from_point=edge.point_for(current),
                    to_point=edge.point_for(neighbor),
                    cost=edge.cost,
                    cells=tuple(line_cells(edge.point_a, edge.point_b)),
                )
            )
    return tunnels


class SeamBridger:
    """Connects the disconnected floor regions of a grid with a minimum tunnel tree."""

    def __init__(self, config: Optional[BridgingConfig] = None) -> None:
        self.config = config or BridgingConfig()
        self.metrics: Optional[BridgingMetrics] = None
        self.estimator = EdgeCostEstimator(self.config)
        self.pruner = EdgePruner(self.config)
        self.optimizer = GraphOptimizer(self.config)

    def _run_phase(self, name: str, func: Callable[..., T], *args, **kwargs) -> T:
        if self.metrics is None:
            return func(*args, **kwargs)
        start = perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            self.metrics.record_phase(name, perf_counter() - start)

    def _validate_points(self, grid: PassabilityGrid) -> None:
        labelled: List[Tuple[str, Coord]] = []
        if self.config.spawn is not None:
            labelled.append(("Spawn", self.config.spawn))
        labelled.extend(("Required point", point) for point in self.config.required_points)
        for label, (x, y) in labelled:
            if not (0 <= x < grid.width and 0 <= y < grid.height):
                raise DegenerateInputError(f"{label} {(x, y)} lies outside the {grid.width}x{grid.height} grid")
            if not grid.is_passable(x, y):
                raise DegenerateInputError(f"{label} {(x, y)} lies on a blocked tile")

    def _resolve_terminals(self, grid: PassabilityGrid, region_map: RegionMap) -> List[int]:
        """Region indices that must be joined; the first one roots the tree."""
        terminals = [region_map.region_at(x, y) for x, y in self.config.terminal_points]
        if terminals:
            return unique_terminals(terminals)
        x, y = grid.find_first_passable()
        first = region_map.region_at(x, y)
        # The first passable tile may sit in a dropped pocket.
        return [first if first is not None else 0]

    def plan(self, grid: PassabilityGrid) -> BridgingResult:
        """Run every stage except carving; the grid is left untouched."""
        config = self.config
        self.metrics = BridgingMetrics() if config.collect_metrics else None
        self._validate_points(grid)

        region_map = self._run_phase(
            "extract",
            extract_regions,
            grid,
            config.min_area_ratio,
            config.terminal_points,
        )
        regions = region_map.regions
        if not regions:
            raise DegenerateInputError("Grid has no passable regions to bridge")
        terminals = self._resolve_terminals(grid, region_map)

        pairs = candidate_pairs(regions, config.max_edge_distance)
        edges = self._run_phase("estimate", self.estimator.estimate, region_map, pairs)
        pruned, report = self._run_phase("prune", self.pruner.prune, regions, edges)
        full = CandidateGraph(len(regions), edges)
        selection = self._run_phase("optimize", self.optimizer.optimize, pruned, regions, terminals, full)

        tunnels = orient_tunnels(selection, terminals[0])
        result = BridgingResult(
            tunnels=tunnels,
            selection=selection,
            required_regions=tuple(terminals),
            spawn_region=terminals[0],
            region_count=len(regions),
            pruning=report,
        )
        if self.metrics is not None:
            self.metrics.count("regions", len(regions))
            self.metrics.count("dropped_cells", region_map.dropped_cells)
            for stage, count in report.stage_counts.items():
                self.metrics.count(f"edges_{stage}", count)
            self.metrics.count("tunnels", len(tunnels))
            result.metrics = self.metrics.snapshot()

        if not selection.threshold_met:
            if config.strict_coverage:
                raise CoverageUnmetError(result, config.coverage_threshold)
            logger.warning(
                "Coverage %.3f is below threshold %.3f; returning best effort",
                selection.coverage,
                config.coverage_threshold,
            )
        return result

    def bridge(self, grid: PassabilityGrid) -> BridgingResult:
        """Plan the tunnel tree and carve it into ``grid``."""
        result = self.plan(grid)
        result.cells_carved = self._run_phase(
            "carve",
            carve_tunnels,
            grid,
            result.tunnels,
            self.config.carve_radius,
        )
        result.carved = True
        if self.metrics is not None:
            self.metrics.count("cells_carved", result.cells_carved)
            result.metrics = self.metrics.snapshot()
        logger.info(
            "Bridged %d regions with %d tunnels (cost %d, %d tiles opened, coverage %.3f)",
            result.region_count,
            len(result.tunnels),
            result.total_cost,
            result.cells_carved,
            result.coverage,
        )
        return result


def bridge_regions(
    grid: PassabilityGrid,
    config: Optional[BridgingConfig] = None,
    **overrides,
) -> BridgingResult:
    """Convenience wrapper: bridge ``grid`` in place with optional config overrides."""
    config = config or BridgingConfig()
    if overrides:
        config = replace(config, **overrides)
    return SeamBridger(config).bridge(grid)
