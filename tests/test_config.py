import pytest

from seam_config import BridgingConfig
from seam_metrics import BridgingMetrics


def test_defaults_match_documented_parameters():
    config = BridgingConfig()

    assert config.coverage_threshold == 0.75
    assert config.min_area_ratio == 0.05
    assert config.use_pgd and not config.use_frr
    assert config.n_skew == 2
    assert config.max_pgd_iterations == 20
    assert config.use_delaunay
    assert config.angular_sectors == 6
    assert config.occlusion_factor == 1.2
    assert config.max_edge_distance == 100.0
    assert config.required_points == ()
    assert config.spawn is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"coverage_threshold": 1.5},
        {"coverage_threshold": -0.1},
        {"min_area_ratio": 1.0},
        {"n_skew": -1},
        {"max_pgd_iterations": -2},
        {"frr_half_angle": 0.0},
        {"frr_bins": 0},
        {"frr_levels": -1},
        {"angular_sectors": 0},
        {"occlusion_factor": 0.9},
        {"max_edge_distance": -1},
        {"exact_vertex_limit": -1},
        {"carve_radius": -1},
        {"max_workers": 0},
        {"required_points": [(1, 2, 3)]},
        {"spawn": 7},
    ],
)
def test_invalid_values_raise(overrides):
    with pytest.raises(ValueError):
        BridgingConfig(**overrides)


def test_points_are_normalized_to_int_pairs():
    config = BridgingConfig(spawn=[2.0, 3.0], required_points=[[4, 5], (6.0, 7)])

    assert config.spawn == (2, 3)
    assert config.required_points == ((4, 5), (6, 7))
    assert config.terminal_points == ((2, 3), (4, 5), (6, 7))


def test_metrics_snapshot_averages_phase_timings():
    metrics = BridgingMetrics()
    metrics.record_phase("estimate", 0.2)
    metrics.record_phase("estimate", 0.4)
    metrics.count("tunnels", 2)
    metrics.count("tunnels", 1)

    snapshot = metrics.snapshot()

    assert snapshot["phases"]["estimate"]["invocations"] == 2
    assert snapshot["phases"]["estimate"]["average_time"] == pytest.approx(0.3)
    assert snapshot["counters"] == {"tunnels": 3}
