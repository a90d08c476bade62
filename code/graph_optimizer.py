"""Selection of the tunnel tree joining required regions and meeting coverage."""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from component_manager import ComponentManager, DisjointSetUnion
from graph_analysis import build_region_graph, component_of
from seam_config import BridgingConfig
from seam_constants import COVERAGE_EPSILON
from seam_errors import InfeasibleError
from seam_models import CandidateGraph, Edge, Region, Selection

logger = logging.getLogger(__name__)

Tree = Tuple[List[int], List[Edge]]
Components = Union[ComponentManager, DisjointSetUnion]


def unique_terminals(terminals: Iterable[int]) -> List[int]:
    seen: Set[int] = set()
    ordered: List[int] = []
    for terminal in terminals:
        if terminal not in seen:
            seen.add(terminal)
            ordered.append(terminal)
    return ordered


def check_feasible(graph: CandidateGraph, terminals: Sequence[int]) -> None:
    """Raise InfeasibleError unless every terminal shares one component."""
    nx_graph = build_region_graph(range(graph.vertex_count), graph.edges)
    components: List[Tuple[int, ...]] = []
    for terminal in terminals:
        component = component_of(nx_graph, terminal)
        if component is not None and component not in components:
            components.append(component)
    if len(components) > 1:
        raise InfeasibleError(terminals, components)


def kruskal(
    edges: Iterable[Edge],
    stop_when: Optional[Sequence[int]] = None,
    components: Optional[Components] = None,
) -> Tuple[List[Edge], Components]:
    """Minimum spanning forest in (cost, a, b) order.

    With ``stop_when`` the scan ends as soon as those vertices share a component.
    ``components`` defaults to an unbounded union-find over whatever vertices appear.
    """
    if components is None:
        components = DisjointSetUnion()
    chosen: List[Edge] = []
    targets = list(stop_when or ())
    for edge in sorted(edges, key=lambda e: e.sort_key):
        if components.connected(edge.a, edge.b):
            continue
        components.union(edge.a, edge.b)
        chosen.append(edge)
        if targets and components.all_connected(targets):
            break
    return chosen, components


def prune_leaves(edges: Sequence[Edge], keep: Iterable[int]) -> List[Edge]:
    """Repeatedly strip leaves that are not in ``keep``."""
    keep_set = set(keep)
    degree: Dict[int, int] = {}
    incident: Dict[int, List[Edge]] = {}
    for edge in edges:
        for vertex in (edge.a, edge.b):
            degree[vertex] = degree.get(vertex, 0) + 1
            incident.setdefault(vertex, []).append(edge)
    removed: Set[Tuple[int, int]] = set()
    queue = deque(sorted(v for v, d in degree.items() if d == 1 and v not in keep_set))
    while queue:
        leaf = queue.popleft()
        if degree[leaf] != 1:
            continue
        for edge in incident[leaf]:
            if edge.key in removed:
                continue
            removed.add(edge.key)
            degree[leaf] -= 1
            other = edge.other(leaf)
            degree[other] -= 1
            if degree[other] == 1 and other not in keep_set:
                queue.append(other)
            break
    return [edge for edge in edges if edge.key not in removed]


def tree_vertices(edges: Sequence[Edge], terminals: Sequence[int]) -> List[int]:
    vertices = list(terminals)
    seen = set(vertices)
    for edge in edges:
        for vertex in (edge.a, edge.b):
            if vertex not in seen:
                seen.add(vertex)
                vertices.append(vertex)
    return vertices


def steiner_approximation(graph: CandidateGraph, terminals: Sequence[int]) -> Tree:
    """Union-find 2-approximation of the Steiner tree over ``terminals``."""
    chosen, components = kruskal(graph.edges, stop_when=terminals, components=ComponentManager(graph.vertex_count))
    root = components.find(terminals[0])
    component_edges = [edge for edge in chosen if components.find(edge.a) == root]
    tree_edges = prune_leaves(component_edges, terminals)
    return tree_vertices(tree_edges, terminals), tree_edges


def steiner_exact(graph: CandidateGraph, terminals: Sequence[int]) -> Tree:
    """Optimal Steiner tree by Dreyfus-Wagner dynamic programming over terminal subsets.

    ``best[mask][v]`` is the cheapest tree joining the terminals in ``mask``
    together with vertex ``v``; ``merged[mask][v]`` is the same restricted to
    trees that branch at ``v``. Costs are shortest-path distances in the
    candidate graph, and the winning tree is expanded back into candidate
    edges afterwards.
    """
    nx_graph = build_region_graph(range(graph.vertex_count), graph.edges)
    closure = dict(nx.all_pairs_dijkstra(nx_graph, weight="cost"))
    vertices = list(range(graph.vertex_count))
    count = len(terminals)
    full = (1 << count) - 1

    def dist(u: int, v: int) -> float:
        return closure[u][0].get(v, math.inf)

    best: Dict[int, List[float]] = {}
    merged: Dict[int, List[float]] = {}
    trace: Dict[Tuple[int, int], Tuple[str, int]] = {}
    split: Dict[Tuple[int, int], int] = {}

    for bit, terminal in enumerate(terminals):
        mask = 1 << bit
        best[mask] = [dist(terminal, v) for v in vertices]
        for v in vertices:
            trace[(mask, v)] = ("path", terminal)

    for mask in range(1, full + 1):
        if mask & (mask - 1) == 0:
            continue
        merged_row = [math.inf] * len(vertices)
        low_bit = mask & -mask
        for v in vertices:
            sub = (mask - 1) & mask
            while sub:
                if sub & low_bit:
                    rest = mask ^ sub
                    cost = best[sub][v] + best[rest][v]
                    if cost < merged_row[v]:
                        merged_row[v] = cost
                        split[(mask, v)] = sub
                sub = (sub - 1) & mask
        row = [math.inf] * len(vertices)
        for v in vertices:
            for u in vertices:
                cost = merged_row[u] + dist(u, v)
                if cost < row[v]:
                    row[v] = cost
                    trace[(mask, v)] = ("branch", u)
        merged[mask] = merged_row
        best[mask] = row

    root = terminals[0]
    if math.isinf(best[full][root]):
        raise InfeasibleError(terminals)

    path_pairs: Set[Tuple[int, int]] = set()

    def add_path(u: int, v: int) -> None:
        path = closure[u][1][v]
        for x, y in zip(path, path[1:]):
            path_pairs.add((x, y) if x < y else (y, x))

    stack = [(full, root)]
    while stack:
        mask, v = stack.pop()
        kind, anchor = trace[(mask, v)]
        add_path(anchor, v)
        if kind == "branch":
            sub = split[(mask, anchor)]
            stack.append((sub, anchor))
            stack.append((mask ^ sub, anchor))

    path_edges = [graph.edge(a, b) for a, b in sorted(path_pairs)]
    tree_edges, _ = kruskal(edge for edge in path_edges if edge is not None)
    tree_edges = prune_leaves(tree_edges, terminals)
    return tree_vertices(tree_edges, terminals), tree_edges


class GraphOptimizer:
    """Chooses the tunnel tree for one bridging pass."""

    def __init__(self, config: Optional[BridgingConfig] = None) -> None:
        self.config = config or BridgingConfig()

    def optimize(
        self,
        graph: CandidateGraph,
        regions: Sequence[Region],
        terminals: Sequence[int],
        fallback: Optional[CandidateGraph] = None,
    ) -> Selection:
        """Select a tree spanning ``terminals``; the first terminal is the root.

        When the pruned ``graph`` cannot join the terminals, the search is
        repeated once on ``fallback`` before giving up.
        """
        try:
            return self._solve(graph, regions, terminals)
        except InfeasibleError:
            if fallback is None or fallback is graph:
                raise
            logger.info("Terminals disconnected in pruned graph; retrying with %d unpruned edges", len(fallback))
            return self._solve(fallback, regions, terminals)

    def _solve(self, graph: CandidateGraph, regions: Sequence[Region], terminals: Sequence[int]) -> Selection:
        terminals = unique_terminals(terminals)
        if not terminals:
            raise ValueError("At least one terminal region is required")
        check_feasible(graph, terminals)

        must_include: Set[int] = set()
        if len(terminals) == 1:
            mode = "greedy"
            vertices, edges = [terminals[0]], []
        elif self.config.use_exact and graph.vertex_count < self.config.exact_vertex_limit:
            mode = "exact"
            vertices, edges = steiner_exact(graph, terminals)
        elif self.config.use_mst_terminals:
            mode = "steiner"
            vertices, edges = steiner_approximation(graph, terminals)
        else:
            mode = "greedy"
            vertices, edges = [terminals[0]], []
            must_include = set(terminals)

        vertices, edges = self.expand(graph, regions, vertices, edges, must_include)
        coverage = sum(regions[v].weight for v in vertices)
        threshold_met = coverage >= self.config.coverage_threshold - COVERAGE_EPSILON
        logger.debug(
            "%s selection: %d regions, %d edges, coverage %.3f",
            mode,
            len(vertices),
            len(edges),
            coverage,
        )
        return Selection(
            vertices=tuple(sorted(vertices)),
            edges=tuple(edges),
            coverage=coverage,
            threshold_met=threshold_met,
            mode=mode,
        )

    def expand(
        self,
        graph: CandidateGraph,
        regions: Sequence[Region],
        vertices: Sequence[int],
        edges: Sequence[Edge],
        must_include: Iterable[int] = (),
    ) -> Tree:
        """Greedily attach the most efficient region until coverage is reached.

        Efficiency is ``weight / cost``; zero-cost links win outright and ties go
        to the lowest region index. Stops early when nothing else is reachable.
        """
        selected = list(vertices)
        selected_set = set(selected)
        chosen = list(edges)
        pending = set(must_include) - selected_set
        coverage = sum(regions[v].weight for v in selected)
        threshold = self.config.coverage_threshold - COVERAGE_EPSILON

        while coverage < threshold or pending:
            pick = self._most_efficient(graph, regions, selected_set)
            if pick is None:
                break
            region, edge = pick
            selected.append(region)
            selected_set.add(region)
            chosen.append(edge)
            pending.discard(region)
            coverage += regions[region].weight

        if pending:
            raise InfeasibleError(sorted(pending))
        return selected, chosen

    @staticmethod
    def _most_efficient(
        graph: CandidateGraph,
        regions: Sequence[Region],
        selected: Set[int],
    ) -> Optional[Tuple[int, Edge]]:
        best: Optional[Tuple[int, Edge]] = None
        best_efficiency = -1.0
        for region in range(graph.vertex_count):
            if region in selected:
                continue
            link: Optional[Edge] = None
            for neighbor in graph.neighbors(region):
                if neighbor not in selected:
                    continue
                edge = graph.edge(region, neighbor)
                if link is None or (edge.cost, neighbor) < (link.cost, link.other(region)):
                    link = edge
            if link is None:
                continue
            efficiency = math.inf if link.cost == 0 else regions[region].weight / link.cost
            if efficiency > best_efficiency:
                best, best_efficiency = (region, link), efficiency
        return best
