"""networkx views of region graphs for connectivity and tree checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from seam_models import Edge


@dataclass(frozen=True)
class GraphSummary:
    """Shape statistics for a region graph."""

    vertex_count: int
    edge_count: int
    component_count: int
    cycle_count: int
    largest_component_fraction: float
    component_sizes: Tuple[int, ...] = field(default=())

    @property
    def is_connected(self) -> bool:
        return self.component_count <= 1

    @property
    def is_forest(self) -> bool:
        return self.cycle_count == 0


def build_region_graph(vertices: Iterable[int], edges: Iterable[Edge]) -> nx.Graph:
    """Undirected graph with one node per region and ``cost``-weighted edges."""
    graph = nx.Graph()
    for vertex in vertices:
        graph.add_node(vertex)
    for edge in edges:
        graph.add_edge(edge.a, edge.b, cost=edge.cost, edge=edge)
    return graph


def connected_components(graph: nx.Graph) -> List[Tuple[int, ...]]:
    """Components as sorted tuples, ordered by their smallest region index."""
    components = [tuple(sorted(component)) for component in nx.connected_components(graph)]
    components.sort()
    return components


def is_connected(graph: nx.Graph) -> bool:
    if graph.number_of_nodes() == 0:
        return True
    return nx.is_connected(graph)


def is_tree(vertices: Sequence[int], edges: Sequence[Edge]) -> bool:
    """True when ``edges`` form exactly one tree spanning ``vertices``."""
    if not vertices:
        return not edges
    if len(edges) != len(vertices) - 1:
        return False
    graph = build_region_graph(vertices, edges)
    if graph.number_of_nodes() != len(vertices):
        return False
    return nx.is_tree(graph)


def component_of(graph: nx.Graph, vertex: int) -> Optional[Tuple[int, ...]]:
    if vertex not in graph:
        return None
    return tuple(sorted(nx.node_connected_component(graph, vertex)))


def summarize_graph(graph: nx.Graph) -> GraphSummary:
    vertex_count = graph.number_of_nodes()
    components = connected_components(graph) if vertex_count else []
    sizes = tuple(sorted((len(component) for component in components), reverse=True))
    largest_fraction = sizes[0] / vertex_count if sizes else 0.0
    return GraphSummary(
        vertex_count=vertex_count,
        edge_count=graph.number_of_edges(),
        component_count=len(components),
        cycle_count=len(nx.cycle_basis(graph)),
        largest_component_fraction=largest_fraction,
        component_sizes=sizes,
    )
