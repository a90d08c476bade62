from .base import EndpointPair, EndpointRefiner, PairContext
from .perimeter_descent import PerimeterDescent
from .frustum_rays import FrustumRays

__all__ = [
    "EndpointPair",
    "EndpointRefiner",
    "PairContext",
    "PerimeterDescent",
    "FrustumRays",
]
