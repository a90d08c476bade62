"""Exceptions surfaced by a bridging pass."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Tuple

if TYPE_CHECKING:
    from seam_models import BridgingResult


class BridgingError(Exception):
    """Base class for every failure reported by the bridging engine."""


class DegenerateInputError(BridgingError, ValueError):
    """The grid or terminals are unusable before any graph work can start."""


class InfeasibleError(BridgingError):
    """Required regions cannot be joined even with the full candidate edge set."""

    def __init__(self, required_regions: Sequence[int], components: Sequence[Sequence[int]] = ()) -> None:
        self.required_regions: Tuple[int, ...] = tuple(required_regions)
        self.components: Tuple[Tuple[int, ...], ...] = tuple(tuple(c) for c in components)
        super().__init__(
            f"Required regions {list(self.required_regions)} span "
            f"{len(self.components) or 'multiple'} disconnected components"
        )


class CoverageUnmetError(BridgingError):
    """Required regions connect but the coverage threshold is out of reach."""

    def __init__(self, result: BridgingResult, threshold: float) -> None:
        self.result = result
        self.threshold = threshold
        super().__init__(
            f"Best achievable coverage {result.coverage:.3f} is below threshold {threshold:.3f}"
        )
