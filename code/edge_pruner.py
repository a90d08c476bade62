"""Sequential geometric pruning of the candidate edge set."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set, Tuple

from graph_analysis import build_region_graph, connected_components
from seam_config import BridgingConfig
from seam_models import CandidateGraph, Edge, PruningReport, Region
from pruners import AngularSectorFilter, DelaunayFilter, EdgeFilter, OcclusionFilter

logger = logging.getLogger(__name__)


def build_filters(config: BridgingConfig) -> List[EdgeFilter]:
    """Filters in their fixed application order."""
    filters: List[EdgeFilter] = []
    if config.use_delaunay:
        filters.append(DelaunayFilter())
    filters.append(AngularSectorFilter(config.angular_sectors))
    filters.append(OcclusionFilter(config.occlusion_factor))
    return filters


class EdgePruner:
    """Runs the filter chain and restores any connectivity the chain broke."""

    def __init__(
        self,
        config: Optional[BridgingConfig] = None,
        filters: Optional[Sequence[EdgeFilter]] = None,
    ) -> None:
        self.config = config or BridgingConfig()
        self.filters = list(filters) if filters is not None else build_filters(self.config)

    def prune(self, regions: Sequence[Region], edges: Sequence[Edge]) -> Tuple[CandidateGraph, PruningReport]:
        report = PruningReport()
        report.stage_counts["full"] = len(edges)
        surviving = sorted(edges, key=lambda edge: edge.key)
        for edge_filter in self.filters:
            surviving = edge_filter.apply(regions, surviving)
            report.stage_counts[edge_filter.name] = len(surviving)
            logger.debug("%s filter kept %d edges", edge_filter.name, len(surviving))

        surviving = self._restore_connectivity(regions, edges, surviving, report)
        report.stage_counts["final"] = len(surviving)
        return CandidateGraph(len(regions), surviving), report

    @staticmethod
    def _restore_connectivity(
        regions: Sequence[Region],
        full_edges: Sequence[Edge],
        pruned_edges: List[Edge],
        report: PruningReport,
    ) -> List[Edge]:
        """Fall back to the unpruned edges inside any component pruning split."""
        vertices = range(len(regions))
        full_graph = build_region_graph(vertices, full_edges)
        pruned_graph = build_region_graph(vertices, pruned_edges)
        kept: Set[Tuple[int, int]] = {edge.key for edge in pruned_edges}
        restored = list(pruned_edges)
        for component in connected_components(full_graph):
            if len(component) < 2:
                continue
            if len(connected_components(pruned_graph.subgraph(component))) == 1:
                continue
            members = set(component)
            for edge in full_edges:
                if edge.a in members and edge.key not in kept:
                    kept.add(edge.key)
                    restored.append(edge)
            report.restored_components.append(component)
            logger.warning(
                "Pruning disconnected regions %s; restored their unpruned edges",
                list(component),
            )
        restored.sort(key=lambda edge: edge.key)
        return restored
