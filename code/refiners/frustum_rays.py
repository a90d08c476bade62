from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from seam_constants import DEFAULT_FRR_BINS, DEFAULT_FRR_HALF_ANGLE, DEFAULT_FRR_LEVELS
from seam_geometry import Coord
from refiners.base import EndpointPair, EndpointRefiner, PairContext


def visible_points(perimeter: Sequence[Coord], origin: np.ndarray, facing: np.ndarray, cos_limit: float) -> np.ndarray:
    """Perimeter tiles inside the cone around ``facing``; the full perimeter if none are."""
    points = np.asarray(perimeter, dtype=float).reshape(-1, 2)
    offsets = points - origin
    norms = np.hypot(offsets[:, 0], offsets[:, 1])
    with np.errstate(divide="ignore", invalid="ignore"):
        cosines = (offsets @ facing) / norms
    mask = (norms > 0) & (cosines >= cos_limit)
    if not mask.any():
        return points
    return points[mask]


class FrustumRays(EndpointRefiner):
    """Hierarchical ray sampling across the gap between two regions.

    Perimeter tiles facing the other region are projected onto the line
    through the midpoint perpendicular to the centroid axis. The projected
    span is split into ``bins`` slices; each slice casts one ray, pairing the
    tile of each region projected nearest the slice center. The cheapest slice
    is subdivided again ``levels`` times.
    """

    name = "frr"

    def __init__(
        self,
        half_angle: float = DEFAULT_FRR_HALF_ANGLE,
        bins: int = DEFAULT_FRR_BINS,
        levels: int = DEFAULT_FRR_LEVELS,
    ) -> None:
        if not (0.0 < half_angle <= 180.0):
            raise ValueError("half_angle must lie within (0, 180] degrees")
        if bins <= 0:
            raise ValueError("bins must be positive")
        if levels < 0:
            raise ValueError("levels cannot be negative")
        self.half_angle = half_angle
        self.bins = bins
        self.levels = levels

    def refine(self, context: PairContext, current: EndpointPair) -> EndpointPair:
        centroid_a = np.asarray(context.region_a.centroid, dtype=float)
        centroid_b = np.asarray(context.region_b.centroid, dtype=float)
        axis = centroid_b - centroid_a
        length = float(np.hypot(axis[0], axis[1]))
        if length == 0.0 or current.cost == 0:
            return current
        unit = axis / length
        normal = np.array([-unit[1], unit[0]])
        midpoint = (centroid_a + centroid_b) / 2.0

        cos_limit = math.cos(math.radians(self.half_angle))
        points_a = visible_points(context.region_a.perimeter, centroid_a, unit, cos_limit)
        points_b = visible_points(context.region_b.perimeter, centroid_b, -unit, cos_limit)
        proj_a = (points_a - midpoint) @ normal
        proj_b = (points_b - midpoint) @ normal

        low = float(min(proj_a.min(), proj_b.min()))
        high = float(max(proj_a.max(), proj_b.max()))
        best = current
        for _ in range(self.levels + 1):
            sampled = self._sample_bins(context, points_a, proj_a, points_b, proj_b, low, high)
            if sampled is None:
                break
            candidate, (low, high) = sampled
            if candidate.cost < best.cost:
                best = candidate
            if best.cost == 0 or high <= low:
                break
        return best

    def _sample_bins(
        self,
        context: PairContext,
        points_a: np.ndarray,
        proj_a: np.ndarray,
        points_b: np.ndarray,
        proj_b: np.ndarray,
        low: float,
        high: float,
    ) -> Optional[Tuple[EndpointPair, Tuple[float, float]]]:
        width = (high - low) / self.bins
        best: Optional[EndpointPair] = None
        best_range = (low, high)
        for idx in range(self.bins):
            bin_low = low + idx * width
            bin_high = high if idx == self.bins - 1 else bin_low + width
            in_a = (proj_a >= bin_low) & (proj_a <= bin_high)
            in_b = (proj_b >= bin_low) & (proj_b <= bin_high)
            if not in_a.any() and not in_b.any():
                continue
            center = (bin_low + bin_high) / 2.0
            point_a = points_a[int(np.argmin(np.abs(proj_a - center)))]
            point_b = points_b[int(np.argmin(np.abs(proj_b - center)))]
            candidate = context.pair(
                (int(point_a[0]), int(point_a[1])),
                (int(point_b[0]), int(point_b[1])),
            )
            if best is None or candidate.cost < best.cost:
                best = candidate
                best_range = (bin_low, bin_high)
        if best is None:
            return None
        return best, best_range
