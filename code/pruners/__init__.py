from .base import EdgeFilter
from .delaunay import DelaunayFilter, delaunay_pairs
from .angular import AngularSectorFilter
from .occlusion import OcclusionFilter

__all__ = [
    "EdgeFilter",
    "DelaunayFilter",
    "delaunay_pairs",
    "AngularSectorFilter",
    "OcclusionFilter",
]
