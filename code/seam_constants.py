"""Shared constants for the glass seam bridging engine."""

from __future__ import annotations

# Label sentinels written into the region label array.
BLOCKED_LABEL = -1
DROPPED_LABEL = -2  # Passable cells whose region fell below the minimum area.

DEFAULT_COVERAGE_THRESHOLD = 0.75
DEFAULT_MIN_AREA_RATIO = 0.05

DEFAULT_USE_PGD = True
DEFAULT_N_SKEW = 2
DEFAULT_MAX_PGD_ITERATIONS = 20
# Offsets (delta_a, delta_b) tried by perimeter gradient descent, in order.
PGD_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (1, 1))

DEFAULT_USE_FRR = False
DEFAULT_FRR_HALF_ANGLE = 60.0  # Degrees.
DEFAULT_FRR_BINS = 8
DEFAULT_FRR_LEVELS = 3

DEFAULT_USE_DELAUNAY = True
DEFAULT_ANGULAR_SECTORS = 6
DEFAULT_OCCLUSION_FACTOR = 1.2
DEFAULT_MAX_EDGE_DISTANCE = 100.0  # 0 disables the distance cap.

DEFAULT_EXACT_VERTEX_LIMIT = 20

# Tolerance used when comparing accumulated coverage against the threshold.
COVERAGE_EPSILON = 1e-9
