import pytest

from edge_estimator import (
    EdgeCostEstimator,
    baseline_endpoints,
    candidate_pairs,
    estimate_edges,
    nearest_perimeter_point,
)
from refiners import FrustumRays, PairContext, PerimeterDescent
from seam_config import BridgingConfig

# The wall between the two rooms is one tile thick in the top rows and three
# tiles thick where the centroid line crosses it.
STEPPED_WALL = [
    "....#......",
    "....#......",
    "....###....",
    "....###....",
    "....###....",
]

RING_AROUND_ROOM = [
    ".......",
    ".#####.",
    ".#...#.",
    ".#...#.",
    ".#...#.",
    ".#####.",
    ".......",
]


def test_baseline_uses_exit_points_on_centroid_line(make_region_map):
    region_map = make_region_map(
        [
            ".....###.....",
            ".....###.....",
            ".....###.....",
            ".....###.....",
            ".....###.....",
        ]
    )
    estimator = EdgeCostEstimator(BridgingConfig(use_pgd=False))

    edge = estimator.estimate_pair(region_map, 0, 1)

    assert edge.point_a == (4, 2)
    assert edge.point_b == (8, 2)
    assert edge.cost == edge.baseline_cost == 3


def test_edge_cost_matches_blocked_tiles_between_endpoints(make_region_map):
    region_map = make_region_map(STEPPED_WALL)

    edge = EdgeCostEstimator().estimate_pair(region_map, 0, 1)

    assert edge.cost == region_map.segment_cost(edge.point_a, edge.point_b)


def test_perimeter_descent_finds_thinner_wall(make_region_map):
    region_map = make_region_map(STEPPED_WALL)

    edge = EdgeCostEstimator(BridgingConfig(use_pgd=True)).estimate_pair(region_map, 0, 1)

    assert edge.baseline_cost == 3
    assert edge.cost == 1
    assert edge.point_a == (3, 1)
    assert edge.point_b == (6, 1)


def test_zero_skew_keeps_walks_parallel(make_region_map):
    region_map = make_region_map(STEPPED_WALL)

    edge = EdgeCostEstimator(BridgingConfig(n_skew=0)).estimate_pair(region_map, 0, 1)

    assert edge.cost == 3


def test_zero_iterations_returns_baseline(make_region_map):
    region_map = make_region_map(STEPPED_WALL)

    edge = EdgeCostEstimator(BridgingConfig(max_pgd_iterations=0)).estimate_pair(region_map, 0, 1)

    assert edge.cost == edge.baseline_cost == 3


@pytest.mark.parametrize(
    "config",
    [
        BridgingConfig(use_pgd=False, use_frr=True),
        BridgingConfig(use_pgd=True, use_frr=True),
        BridgingConfig(use_frr=True, frr_bins=1, frr_levels=0),
        BridgingConfig(use_frr=True, frr_half_angle=10.0),
    ],
)
def test_refinement_never_exceeds_baseline(make_region_map, config):
    region_map = make_region_map(STEPPED_WALL)

    edge = EdgeCostEstimator(config).estimate_pair(region_map, 0, 1)

    assert edge.cost <= edge.baseline_cost
    assert edge.cost == region_map.segment_cost(edge.point_a, edge.point_b)


def test_frustum_rays_returns_current_pair_when_nothing_is_cheaper(make_region_map):
    region_map = make_region_map(STEPPED_WALL)
    context = PairContext(region_map, region_map.regions[0], region_map.regions[1])
    current = context.pair((3, 0), (5, 0))

    refined = FrustumRays().refine(context, current)

    assert refined.cost == 1


def test_refiners_validate_parameters():
    with pytest.raises(ValueError):
        PerimeterDescent(n_skew=-1)
    with pytest.raises(ValueError):
        FrustumRays(half_angle=0.0)
    with pytest.raises(ValueError):
        FrustumRays(bins=0)


def test_coincident_centroids_fall_back_to_nearest_boundary(make_region_map):
    region_map = make_region_map(RING_AROUND_ROOM)
    ring, room = region_map.regions

    assert ring.centroid == pytest.approx(room.centroid)
    assert baseline_endpoints(ring, room) == ((3, 0), (3, 2))

    edge = EdgeCostEstimator().estimate_pair(region_map, 0, 1)

    assert edge.cost == 1


def test_nearest_perimeter_point_prefers_walk_order(make_region_map):
    region_map = make_region_map(RING_AROUND_ROOM)

    assert nearest_perimeter_point(region_map.regions[1], (3.0, 3.0)) == (3, 2)


def test_candidate_pairs_respect_distance_cap(make_region_map):
    region_map = make_region_map(
        [
            "...##...##...##...",
            "...##...##...##...",
            "...##...##...##...",
        ]
    )

    assert candidate_pairs(region_map.regions) == [
        (0, 1),
        (0, 2),
        (0, 3),
        (1, 2),
        (1, 3),
        (2, 3),
    ]
    assert candidate_pairs(region_map.regions, 5.0) == [(0, 1), (1, 2), (2, 3)]


def test_threaded_estimation_matches_serial(make_region_map):
    region_map = make_region_map(
        [
            "...##...##...##...",
            "...##...##...##...",
            "...##...##...##...",
        ]
    )

    serial = estimate_edges(region_map, BridgingConfig(max_workers=1))
    threaded = estimate_edges(region_map, BridgingConfig(max_workers=4))

    assert serial == threaded
