from __future__ import annotations

from seam_constants import DEFAULT_MAX_PGD_ITERATIONS, DEFAULT_N_SKEW, PGD_OFFSETS
from refiners.base import EndpointPair, EndpointRefiner, PairContext


class PerimeterDescent(EndpointRefiner):
    """Discrete gradient descent along both ordered perimeters.

    Each step tries the index offsets in ``PGD_OFFSETS`` and moves to the first
    pair that is strictly cheaper. ``n_skew`` caps how far the two walks may
    drift apart in total, which keeps the tunnel roughly straight across the gap.
    """

    name = "pgd"

    def __init__(
        self,
        n_skew: int = DEFAULT_N_SKEW,
        max_iterations: int = DEFAULT_MAX_PGD_ITERATIONS,
    ) -> None:
        if n_skew < 0:
            raise ValueError("n_skew cannot be negative")
        if max_iterations < 0:
            raise ValueError("max_iterations cannot be negative")
        self.n_skew = n_skew
        self.max_iterations = max_iterations

    def refine(self, context: PairContext, current: EndpointPair) -> EndpointPair:
        perimeter_a = context.region_a.perimeter
        perimeter_b = context.region_b.perimeter
        if not perimeter_a or not perimeter_b or current.cost == 0:
            return current

        index_a = context.region_a.perimeter_position(current.point_a)
        index_b = context.region_b.perimeter_position(current.point_b)
        skew = 0
        best = current
        for _ in range(self.max_iterations):
            step = self._first_improvement(context, best, index_a, index_b, skew)
            if step is None:
                break
            best, index_a, index_b, skew = step
            if best.cost == 0:
                break
        return best

    def _first_improvement(
        self,
        context: PairContext,
        best: EndpointPair,
        index_a: int,
        index_b: int,
        skew: int,
    ):
        perimeter_a = context.region_a.perimeter
        perimeter_b = context.region_b.perimeter
        for delta_a, delta_b in PGD_OFFSETS:
            drift = skew + delta_a - delta_b
            if abs(drift) > self.n_skew:
                continue
            next_a = (index_a + delta_a) % len(perimeter_a)
            next_b = (index_b + delta_b) % len(perimeter_b)
            candidate = context.pair(perimeter_a[next_a], perimeter_b[next_b])
            if candidate.cost < best.cost:
                return candidate, next_a, next_b, drift
        return None
