import logging

import pytest

from graph_analysis import build_region_graph, is_connected, is_tree
from edge_estimator import EdgeCostEstimator, candidate_pairs
from edge_pruner import EdgePruner
from region_extractor import extract_regions
from seam_bridger import SeamBridger, bridge_regions
from seam_config import BridgingConfig
from seam_errors import CoverageUnmetError, DegenerateInputError, InfeasibleError
from seam_grid import TileGrid


ROOM_RECTS = [
    (0, 0, 5, 4),
    (8, 0, 6, 5),
    (17, 1, 6, 4),
    (1, 8, 6, 6),
    (10, 9, 5, 5),
    (18, 10, 5, 5),
]


@pytest.fixture
def scattered_rooms_grid() -> TileGrid:
    grid = TileGrid(24, 16)
    for x, y, w, h in ROOM_RECTS:
        grid.fill_rect(x, y, w, h)
    return grid


def region_count(grid):
    return len(extract_regions(grid))


def test_two_rooms_get_one_tunnel_through_the_wall(two_rooms_grid):
    result = SeamBridger(BridgingConfig(coverage_threshold=0.6, spawn=(0, 0))).bridge(two_rooms_grid)

    assert len(result.tunnels) == 1
    tunnel = result.tunnels[0]
    assert tunnel.cost == 3
    assert (tunnel.from_region, tunnel.to_region) == (0, 1)
    assert result.cells_carved == 3
    assert result.threshold_met
    assert region_count(two_rooms_grid) == 1


def test_threshold_met_by_spawn_room_alone_needs_no_tunnel(two_rooms_grid):
    # Coverage is compared inclusively (DESIGN.md, decision 6): the spawn room
    # holds exactly half the floor, so ct=0.5 stops before adding a tunnel and
    # the one-tunnel case above needs ct=0.6.
    result = SeamBridger(BridgingConfig(coverage_threshold=0.5, spawn=(0, 0))).bridge(two_rooms_grid)

    assert result.tunnels == []
    assert result.coverage == pytest.approx(0.5)
    assert region_count(two_rooms_grid) == 2


def test_required_ends_of_a_chain_join_through_middle_rooms(four_rooms_grid):
    config = BridgingConfig(coverage_threshold=0.0, required_points=[(0, 0), (15, 0)])

    result = SeamBridger(config).bridge(four_rooms_grid)

    keys = sorted(edge.key for edge in result.selection.edges)
    assert keys == [(0, 1), (1, 2), (2, 3)]
    assert (0, 3) not in keys
    assert is_tree(result.selection.vertices, result.selection.edges)
    assert result.required_regions == (0, 3)
    assert region_count(four_rooms_grid) == 1


def test_single_region_needs_no_tunnels(make_grid):
    grid = make_grid(["....", "....", "...."])

    result = SeamBridger().bridge(grid)

    assert result.tunnels == []
    assert result.coverage == pytest.approx(1.0)
    assert result.threshold_met
    assert result.region_count == 1


def test_large_spawn_region_already_meets_threshold(make_grid):
    grid = make_grid(
        [
            "....#..",
            "....#..",
            "....###",
            "....###",
        ]
    )

    result = SeamBridger(BridgingConfig(coverage_threshold=0.75, spawn=(1, 1))).bridge(grid)

    assert result.region_count == 2
    assert result.coverage == pytest.approx(0.8)
    assert result.tunnels == []


def test_first_tile_in_dropped_pocket_roots_tree_at_first_kept_region(make_grid):
    grid = make_grid(
        [
            ".#......",
            "##......",
            "........",
        ]
    )
    assert grid.find_first_passable() == (0, 0)

    result = SeamBridger().plan(grid)

    assert result.region_count == 1
    assert result.spawn_region == 0
    assert result.required_regions == (0,)
    assert result.tunnels == []
    assert result.coverage == pytest.approx(20 / 21)


def test_tiny_pockets_are_never_targeted(make_grid, caplog):
    grid = make_grid(
        [
            "........#.",
            "........##",
            "........#.",
        ]
    )

    with caplog.at_level(logging.WARNING):
        result = SeamBridger(BridgingConfig(coverage_threshold=1.0)).bridge(grid)

    assert result.region_count == 1
    assert result.tunnels == []
    assert not result.threshold_met
    assert result.coverage == pytest.approx(24 / 26)
    assert grid.is_passable(9, 0)
    assert "below threshold" in caplog.text


def test_strict_coverage_raises_without_carving(make_grid):
    rows = [
        "........#.",
        "........##",
        "........#.",
    ]
    grid = make_grid(rows)

    with pytest.raises(CoverageUnmetError) as excinfo:
        SeamBridger(BridgingConfig(coverage_threshold=1.0, strict_coverage=True)).bridge(grid)

    assert excinfo.value.result.coverage == pytest.approx(24 / 26)
    assert grid.to_strings() == rows


def test_required_regions_beyond_edge_distance_are_infeasible(two_rooms_grid):
    before = two_rooms_grid.copy()
    config = BridgingConfig(max_edge_distance=5.0, required_points=[(0, 0), (12, 0)])

    with pytest.raises(InfeasibleError):
        SeamBridger(config).bridge(two_rooms_grid)

    assert two_rooms_grid == before


@pytest.mark.parametrize(
    "config",
    [
        BridgingConfig(spawn=(6, 2)),
        BridgingConfig(required_points=[(30, 0)]),
        BridgingConfig(required_points=[(0, 0), (-1, 2)]),
    ],
)
def test_bad_terminals_are_degenerate(two_rooms_grid, config):
    with pytest.raises(DegenerateInputError):
        SeamBridger(config).plan(two_rooms_grid)


def test_grid_without_floor_is_degenerate():
    with pytest.raises(DegenerateInputError):
        SeamBridger().bridge(TileGrid(6, 6))


def test_plan_leaves_grid_untouched(scattered_rooms_grid):
    before = scattered_rooms_grid.copy()

    result = SeamBridger(BridgingConfig(coverage_threshold=1.0)).plan(scattered_rooms_grid)

    assert result.tunnels
    assert not result.carved
    assert scattered_rooms_grid == before


def test_bridging_is_deterministic(scattered_rooms_grid):
    first = scattered_rooms_grid.copy()
    second = scattered_rooms_grid.copy()
    config = BridgingConfig(coverage_threshold=0.9, use_frr=True)

    result_a = SeamBridger(config).bridge(first)
    result_b = SeamBridger(config).bridge(second)

    assert [t.to_dict() for t in result_a.tunnels] == [t.to_dict() for t in result_b.tunnels]
    assert first == second


@pytest.mark.parametrize(
    "config",
    [
        BridgingConfig(coverage_threshold=1.0),
        BridgingConfig(coverage_threshold=0.8, use_frr=True, use_pgd=False),
        BridgingConfig(coverage_threshold=0.5, required_points=[(20, 12), (2, 9)]),
        BridgingConfig(coverage_threshold=0.0, required_points=[(20, 12), (2, 9), (20, 2)], use_exact=True),
        BridgingConfig(coverage_threshold=0.9, use_delaunay=False, angular_sectors=4),
    ],
)
def test_selection_is_always_a_tree(scattered_rooms_grid, config):
    result = SeamBridger(config).plan(scattered_rooms_grid)
    selection = result.selection

    assert len(selection.edges) == len(selection.vertices) - 1
    assert is_tree(selection.vertices, selection.edges)
    assert set(result.required_regions) <= set(selection.vertices)


def test_higher_threshold_never_selects_fewer_regions(scattered_rooms_grid):
    counts = []
    for ct in (0.1, 0.3, 0.5, 0.7, 0.9, 1.0):
        result = SeamBridger(BridgingConfig(coverage_threshold=ct)).plan(scattered_rooms_grid)
        counts.append(len(result.selection.vertices))

    assert counts == sorted(counts)
    assert counts[-1] == 6


def test_required_points_are_reachable_after_carving(scattered_rooms_grid):
    required = [(20, 12), (2, 9), (20, 2)]
    config = BridgingConfig(coverage_threshold=0.0, required_points=required)

    SeamBridger(config).bridge(scattered_rooms_grid)

    region_map = extract_regions(scattered_rooms_grid)
    labels = {region_map.label_at(x, y) for x, y in required}
    assert len(labels) == 1


def test_pruning_keeps_full_graph_connected(scattered_rooms_grid):
    region_map = extract_regions(scattered_rooms_grid)
    edges = EdgeCostEstimator().estimate(region_map, candidate_pairs(region_map.regions))

    graph, _ = EdgePruner().prune(region_map.regions, edges)

    assert is_connected(build_region_graph(range(len(region_map)), edges))
    assert is_connected(build_region_graph(range(len(region_map)), graph.edges))


def test_metrics_are_collected_per_phase(scattered_rooms_grid):
    result = SeamBridger(BridgingConfig(collect_metrics=True)).bridge(scattered_rooms_grid)

    assert set(result.metrics["phases"]) == {"extract", "estimate", "prune", "optimize", "carve"}
    assert result.metrics["counters"]["regions"] == 6
    assert result.metrics["counters"]["cells_carved"] == result.cells_carved


def test_bridge_regions_applies_overrides(scattered_rooms_grid):
    result = bridge_regions(scattered_rooms_grid, coverage_threshold=1.0, carve_radius=1)

    assert result.carved
    assert result.threshold_met
    assert region_count(scattered_rooms_grid) == 1
