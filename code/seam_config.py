"""Configuration container for the glass seam bridging engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from seam_constants import (
    DEFAULT_ANGULAR_SECTORS,
    DEFAULT_COVERAGE_THRESHOLD,
    DEFAULT_EXACT_VERTEX_LIMIT,
    DEFAULT_FRR_BINS,
    DEFAULT_FRR_HALF_ANGLE,
    DEFAULT_FRR_LEVELS,
    DEFAULT_MAX_EDGE_DISTANCE,
    DEFAULT_MAX_PGD_ITERATIONS,
    DEFAULT_MIN_AREA_RATIO,
    DEFAULT_N_SKEW,
    DEFAULT_OCCLUSION_FACTOR,
    DEFAULT_USE_DELAUNAY,
    DEFAULT_USE_FRR,
    DEFAULT_USE_PGD,
)
from seam_geometry import Coord


def _as_coord(value: Sequence[int], name: str) -> Coord:
    try:
        x, y = value
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an (x, y) pair, got {value!r}") from exc
    return int(x), int(y)


@dataclass
class BridgingConfig:
    """Aggregates all tunable parameters for one bridging pass."""

    # Fraction of total passable area that must end up reachable from the terminals.
    coverage_threshold: float = DEFAULT_COVERAGE_THRESHOLD
    # Regions smaller than this fraction of the passable area are never bridged.
    min_area_ratio: float = DEFAULT_MIN_AREA_RATIO

    use_pgd: bool = DEFAULT_USE_PGD
    # Maximum accumulated drift between the two perimeter walks during PGD.
    n_skew: int = DEFAULT_N_SKEW
    max_pgd_iterations: int = DEFAULT_MAX_PGD_ITERATIONS

    # Frustum ray refinement is opt-in; it helps with concave region shapes.
    use_frr: bool = DEFAULT_USE_FRR
    frr_half_angle: float = DEFAULT_FRR_HALF_ANGLE  # Degrees.
    frr_bins: int = DEFAULT_FRR_BINS
    frr_levels: int = DEFAULT_FRR_LEVELS

    use_delaunay: bool = DEFAULT_USE_DELAUNAY
    angular_sectors: int = DEFAULT_ANGULAR_SECTORS
    occlusion_factor: float = DEFAULT_OCCLUSION_FACTOR
    # Region pairs whose centroids are farther apart are never considered (0 = unbounded).
    max_edge_distance: float = DEFAULT_MAX_EDGE_DISTANCE

    required_points: Sequence[Coord] = ()
    spawn: Optional[Coord] = None

    use_exact: bool = False
    # Exact Steiner search only runs when the region count is below this limit.
    exact_vertex_limit: int = DEFAULT_EXACT_VERTEX_LIMIT
    use_mst_terminals: bool = True

    carve_radius: int = 0
    # Raise CoverageUnmetError instead of carving a best-effort tunnel set.
    strict_coverage: bool = False
    max_workers: int = 1
    collect_metrics: bool = False

    def __post_init__(self) -> None:
        if not (0.0 <= self.coverage_threshold <= 1.0):
            raise ValueError("BridgingConfig coverage_threshold must lie within [0, 1]")
        if not (0.0 <= self.min_area_ratio < 1.0):
            raise ValueError("BridgingConfig min_area_ratio must lie within [0, 1)")
        if self.n_skew < 0:
            raise ValueError("BridgingConfig n_skew cannot be negative")
        if self.max_pgd_iterations < 0:
            raise ValueError("BridgingConfig max_pgd_iterations cannot be negative")
        if not (0.0 < self.frr_half_angle <= 180.0):
            raise ValueError("BridgingConfig frr_half_angle must lie within (0, 180] degrees")
        if self.frr_bins <= 0:
            raise ValueError("BridgingConfig frr_bins must be positive")
        if self.frr_levels < 0:
            raise ValueError("BridgingConfig frr_levels cannot be negative")
        if self.angular_sectors <= 0:
            raise ValueError("BridgingConfig angular_sectors must be positive")
        if self.occlusion_factor < 1.0:
            raise ValueError("BridgingConfig occlusion_factor must be at least 1.0")
        if self.max_edge_distance < 0:
            raise ValueError("BridgingConfig max_edge_distance cannot be negative")
        if self.exact_vertex_limit < 0:
            raise ValueError("BridgingConfig exact_vertex_limit cannot be negative")
        if self.carve_radius < 0:
            raise ValueError("BridgingConfig carve_radius cannot be negative")
        if self.max_workers <= 0:
            raise ValueError("BridgingConfig max_workers must be positive")

        self.coverage_threshold = float(self.coverage_threshold)
        self.min_area_ratio = float(self.min_area_ratio)
        self.occlusion_factor = float(self.occlusion_factor)
        self.max_edge_distance = float(self.max_edge_distance)
        self.required_points = tuple(
            _as_coord(point, "required point") for point in self.required_points
        )
        if self.spawn is not None:
            self.spawn = _as_coord(self.spawn, "spawn")

    @property
    def terminal_points(self) -> Tuple[Coord, ...]:
        """Spawn first (when set) followed by the required points."""
        points = [] if self.spawn is None else [self.spawn]
        points.extend(self.required_points)
        return tuple(points)
