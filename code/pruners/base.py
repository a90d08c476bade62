from __future__ import annotations

from typing import List, Sequence

from seam_models import Edge, Region


class EdgeFilter:
    """One stage of candidate edge pruning.

    Filters receive the surviving edges of the previous stage and return the
    subset they keep, preserving the input order.
    """

    name = "filter"

    def apply(self, regions: Sequence[Region], edges: Sequence[Edge]) -> List[Edge]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
