"""Core dataclasses shared by the bridging pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from seam_constants import BLOCKED_LABEL
from seam_geometry import Coord, Point, TilePos, line_cells, squared_distance


@dataclass(frozen=True)
class Region:
    """A maximal 4-connected set of passable tiles that survived the area filter."""

    index: int
    cells: Tuple[Coord, ...]
    centroid: Point
    weight: float
    perimeter: Tuple[Coord, ...]  # Cyclic, clockwise boundary walk.
    _cell_set: FrozenSet[Coord] = field(init=False, repr=False, compare=False)
    _perimeter_index: Dict[Coord, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.cells:
            raise ValueError("Region must own at least one cell")
        object.__setattr__(self, "_cell_set", frozenset(self.cells))
        perimeter_index: Dict[Coord, int] = {}
        for idx, cell in enumerate(self.perimeter):
            perimeter_index.setdefault(cell, idx)
        object.__setattr__(self, "_perimeter_index", perimeter_index)

    @property
    def size(self) -> int:
        return len(self.cells)

    def contains(self, cell: Coord) -> bool:
        return tuple(cell) in self._cell_set

    def perimeter_position(self, cell: Coord) -> int:
        """Index of ``cell`` in the perimeter walk, snapping to the nearest boundary tile."""
        idx = self._perimeter_index.get(tuple(cell))
        if idx is not None:
            return idx
        best_idx = 0
        best_dist = None
        for idx, boundary in enumerate(self.perimeter):
            dist = squared_distance(boundary, cell)
            if best_dist is None or dist < best_dist:
                best_idx, best_dist = idx, dist
        return best_idx


@dataclass(frozen=True, eq=False)
class RegionMap:
    """Output of region extraction: per-tile labels plus the surviving regions."""

    labels: np.ndarray  # Shape (height, width); region index or a sentinel.
    regions: Tuple[Region, ...]
    total_passable: int
    dropped_cells: int = 0

    @property
    def width(self) -> int:
        return int(self.labels.shape[1]) if self.labels.ndim == 2 else 0

    @property
    def height(self) -> int:
        return int(self.labels.shape[0])

    def label_at(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return BLOCKED_LABEL
        return int(self.labels[y, x])

    def region_at(self, x: int, y: int) -> Optional[int]:
        """Region index owning the tile, or None for blocked and dropped tiles."""
        label = self.label_at(x, y)
        return label if label >= 0 else None

    def is_blocked(self, x: int, y: int) -> bool:
        return self.label_at(x, y) == BLOCKED_LABEL

    def segment_cost(self, start: Coord, end: Coord) -> int:
        """Number of blocked tiles a straight tunnel from ``start`` to ``end`` would convert."""
        return sum(1 for x, y in line_cells(start, end) if self.is_blocked(x, y))

    def __len__(self) -> int:
        return len(self.regions)


@dataclass(frozen=True)
class Edge:
    """Candidate tunnel between two regions; endpoints are the tunnel mouths."""

    a: int
    b: int
    cost: int
    point_a: Coord
    point_b: Coord
    baseline_cost: Optional[int] = None

    def __post_init__(self) -> None:
        if self.a == self.b:
            raise ValueError(f"Edge endpoints must differ, got {self.a}")
        if self.cost < 0:
            raise ValueError("Edge cost cannot be negative")
        if self.a > self.b:
            a, b = self.b, self.a
            point_a, point_b = self.point_b, self.point_a
            object.__setattr__(self, "a", a)
            object.__setattr__(self, "b", b)
            object.__setattr__(self, "point_a", point_a)
            object.__setattr__(self, "point_b", point_b)
        object.__setattr__(self, "point_a", TilePos.from_tuple(self.point_a))
        object.__setattr__(self, "point_b", TilePos.from_tuple(self.point_b))
        if self.baseline_cost is None:
            object.__setattr__(self, "baseline_cost", self.cost)

    @property
    def key(self) -> Tuple[int, int]:
        return self.a, self.b

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        return self.cost, self.a, self.b

    def other(self, region: int) -> int:
        if region == self.a:
            return self.b
        if region == self.b:
            return self.a
        raise ValueError(f"Region {region} is not an endpoint of edge {self.key}")

    def point_for(self, region: int) -> TilePos:
        if region == self.a:
            return self.point_a
        if region == self.b:
            return self.point_b
        raise ValueError(f"Region {region} is not an endpoint of edge {self.key}")


class CandidateGraph:
    """Regions plus the candidate edges surviving a given pruning stage."""

    def __init__(self, vertex_count: int, edges: Iterable[Edge]) -> None:
        self.vertex_count = vertex_count
        self._edges: Dict[Tuple[int, int], Edge] = {}
        for edge in sorted(edges, key=lambda e: e.key):
            if edge.b >= vertex_count:
                raise IndexError(f"Edge {edge.key} references a missing region")
            self._edges[edge.key] = edge
        self._adjacency: Dict[int, List[int]] = {idx: [] for idx in range(vertex_count)}
        for a, b in self._edges:
            self._adjacency[a].append(b)
            self._adjacency[b].append(a)

    @property
    def edges(self) -> List[Edge]:
        """Edges sorted by their region pair."""
        return list(self._edges.values())

    def edge(self, a: int, b: int) -> Optional[Edge]:
        key = (a, b) if a < b else (b, a)
        return self._edges.get(key)

    def has_edge(self, a: int, b: int) -> bool:
        return self.edge(a, b) is not None

    def neighbors(self, vertex: int) -> List[int]:
        return list(self._adjacency.get(vertex, ()))

    def with_edges(self, edges: Iterable[Edge]) -> CandidateGraph:
        return CandidateGraph(self.vertex_count, edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, key: object) -> bool:
        return key in self._edges


@dataclass(frozen=True)
class Selection:
    """Chosen subgraph: a tree of regions and the tunnels that join them."""

    vertices: Tuple[int, ...]
    edges: Tuple[Edge, ...]
    coverage: float
    threshold_met: bool
    mode: str = "greedy"

    @property
    def total_cost(self) -> int:
        return sum(edge.cost for edge in self.edges)


@dataclass(frozen=True)
class TunnelSegment:
    """A tunnel to carve, oriented from the already connected side outward."""

    from_region: int
    to_region: int
    from_point: TilePos
    to_point: TilePos
    cost: int
    cells: Tuple[Coord, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "from_region": self.from_region,
            "to_region": self.to_region,
            "from_point": self.from_point.to_tuple(),
            "to_point": self.to_point.to_tuple(),
            "cost": self.cost,
        }


@dataclass
class PruningReport:
    """Edge counts after each pruning stage and any recovered disconnections."""

    stage_counts: Dict[str, int] = field(default_factory=dict)
    restored_components: List[Tuple[int, ...]] = field(default_factory=list)

    @property
    def recovered(self) -> bool:
        return bool(self.restored_components)


@dataclass
class BridgingResult:
    """Outcome of one bridging pass."""

    tunnels: List[TunnelSegment]
    selection: Selection
    required_regions: Tuple[int, ...]
    spawn_region: int
    region_count: int
    pruning: PruningReport
    cells_carved: int = 0
    carved: bool = False
    metrics: Mapping[str, object] = field(default_factory=dict)

    @property
    def coverage(self) -> float:
        return self.selection.coverage

    @property
    def threshold_met(self) -> bool:
        return self.selection.threshold_met

    @property
    def total_cost(self) -> int:
        return sum(tunnel.cost for tunnel in self.tunnels)
