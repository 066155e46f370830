import numpy as np
import pytest

from optics_core.bezier import evaluate, tangent
from optics_core.errors import GeometryWarning
from optics_core.geometry import pad_to_dim
from optics_core.intersection import IntersectionConfig, intersect
from optics_core.rays import Ray

ARC = np.array([pad_to_dim(p) for p in ([0.0, 0.0], [0.5, 1.0], [1.0, 0.0])])


def _ray(origin_2d, direction_2d):
    return Ray(pad_to_dim(origin_2d), pad_to_dim(direction_2d))


def test_ray_starting_on_curve_reports_zero_distance():
    origin = evaluate(ARC, 0.3)
    # outward normal of the arc at t=0.3 (tangent is (1, 0.8))
    ray = Ray(origin, pad_to_dim([-0.8, 1.0]))
    hits = intersect(ARC, ray)
    assert len(hits) == 1
    t, distance = hits[0]
    assert np.isclose(t, 0.3, atol=1e-9)
    assert np.isclose(distance, 0.0, atol=1e-9)
    assert distance >= 0.0


def test_two_crossings_are_ordered_nearest_first():
    hits = intersect(ARC, _ray([-1.0, 0.25], [1.0, 0.0]))
    assert len(hits) == 2
    t_lo = (1.0 - np.sqrt(0.5)) / 2.0
    t_hi = (1.0 + np.sqrt(0.5)) / 2.0
    assert np.isclose(hits[0][0], t_lo, atol=1e-9)
    assert np.isclose(hits[1][0], t_hi, atol=1e-9)
    assert np.isclose(hits[0][1], 1.0 + t_lo, atol=1e-9)
    assert np.isclose(hits[1][1], 1.0 + t_hi, atol=1e-9)


def test_reversed_ray_orders_by_distance_not_parameter():
    hits = intersect(ARC, _ray([2.0, 0.25], [-1.0, 0.0]))
    assert [round(t, 6) for t, _ in hits] == [round((1.0 + np.sqrt(0.5)) / 2.0, 6), round((1.0 - np.sqrt(0.5)) / 2.0, 6)]
    assert hits[0][1] < hits[1][1]


def test_hits_behind_origin_are_discarded():
    hits = intersect(ARC, _ray([0.5, 0.25], [1.0, 0.0]))
    assert len(hits) == 1
    assert np.isclose(hits[0][1], np.sqrt(0.5) / 2.0, atol=1e-9)


def test_miss_returns_empty_list():
    assert intersect(ARC, _ray([0.0, 2.0], [1.0, 0.0])) == []
    assert intersect(ARC, _ray([0.5, 2.0], [0.0, 1.0])) == []


def test_hit_points_lie_on_ray_and_curve():
    ray = _ray([-0.3, -0.2], [1.0, 0.6])
    hits = intersect(ARC, ray)
    assert hits
    for t, distance in hits:
        assert np.allclose(evaluate(ARC, t), ray.at(distance), atol=1e-8)


def test_three_crossings_on_cubic_s_curve():
    cps = np.array([pad_to_dim(p) for p in ([0.0, 0.0], [3.0, 1.0], [-2.0, 2.0], [1.0, 3.0])])
    hits = intersect(cps, _ray([0.5, 5.0], [0.0, -1.0]))
    assert len(hits) == 3
    ts = [t for t, _ in hits]
    assert ts == sorted(ts, reverse=True)
    assert np.isclose(hits[1][0], 0.5, atol=1e-9)


def test_crossing_at_curve_endpoint():
    cps = np.array([pad_to_dim([0.0, -1.0]), pad_to_dim([0.0, 1.0])])
    hits = intersect(cps, _ray([-1.0, -1.0], [1.0, 0.0]))
    assert hits == [(0.0, 1.0)]


def test_curve_lying_on_ray_line_reports_endpoints():
    cps = np.array([pad_to_dim([0.0, 0.0]), pad_to_dim([1.0, 0.0])])
    hits = intersect(cps, _ray([-1.0, 0.0], [1.0, 0.0]))
    assert hits == [(0.0, 1.0), (1.0, 2.0)]


@pytest.mark.parametrize("scale", [1.0, 1e4, 1e5, 1e6])
def test_crossing_found_on_large_scale_mirror(scale):
    hits = intersect(ARC * scale, _ray([0.3 * scale, 2.0 * scale], [0.0, -1.0]))
    assert len(hits) == 1
    t, distance = hits[0]
    assert np.isclose(t, 0.3, atol=1e-9)
    assert np.isclose(distance, 1.58 * scale, rtol=1e-9)


@pytest.mark.parametrize("delta", [1e-2, 1e-3, 1e-4, 1e-6])
def test_close_crossing_pair_below_apex(delta):
    hits = intersect(ARC, _ray([-1.0, 0.5 - delta], [1.0, 0.0]))
    half_gap = np.sqrt(delta / 2.0)
    assert len(hits) == 2
    assert np.isclose(hits[0][0], 0.5 - half_gap, atol=1e-7)
    assert np.isclose(hits[1][0], 0.5 + half_gap, atol=1e-7)
    for t, distance in hits:
        assert np.isclose(distance, 1.0 + t, atol=1e-9)


def test_coarse_grid_still_separates_crossings():
    cfg = IntersectionConfig(samples_per_degree=1, min_samples=2)
    assert cfg.num_samples(2) == 3
    hits = intersect(ARC, _ray([-1.0, 0.25], [1.0, 0.0]), cfg)
    assert [round(t, 9) for t, _ in hits] == [round((1.0 - np.sqrt(0.5)) / 2.0, 9), round((1.0 + np.sqrt(0.5)) / 2.0, 9)]


def test_grazing_ray_touches_apex_once():
    hits = intersect(ARC, _ray([-1.0, 0.5], [1.0, 0.0]))
    assert len(hits) == 1
    assert np.isclose(hits[0][0], 0.5, atol=1e-4)
    assert np.allclose(np.abs(tangent(ARC, hits[0][0])), pad_to_dim([1.0, 0.0]), atol=1e-3)


def test_skew_ray_in_3d_misses_planar_curve():
    if ARC.shape[1] < 3:
        pytest.skip("needs at least three dimensions")
    origin = pad_to_dim([0.5, 0.25, 1.0])
    direction = pad_to_dim([1.0, 0.0, 0.0])
    assert intersect(ARC, Ray(origin, direction)) == []


def test_iteration_budget_exhaustion_drops_roots_with_warning():
    cfg = IntersectionConfig(max_iterations=2)
    with pytest.warns(GeometryWarning):
        hits = intersect(ARC, _ray([-1.0, 0.25], [1.0, 0.0]), cfg)
    assert hits == []


def test_sample_count_scales_with_degree():
    cfg = IntersectionConfig(samples_per_degree=10, min_samples=5)
    assert cfg.num_samples(1) == 11
    assert cfg.num_samples(4) == 41
    assert IntersectionConfig().num_samples(1) == 33


@pytest.mark.parametrize(
    "kwargs",
    [
        {"samples_per_degree": 0},
        {"min_samples": 1},
        {"tolerance": 0.0},
        {"t_tolerance": -1.0},
        {"merge_tolerance": -1e-3},
        {"max_iterations": 0},
    ],
)
def test_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        IntersectionConfig(**kwargs)


def test_dimension_mismatch_is_rejected():
    with pytest.raises(ValueError):
        intersect(ARC, Ray(np.zeros(ARC.shape[1] + 1), np.eye(ARC.shape[1] + 1)[0]))
