"""Tests for route divergence detection."""

from __future__ import annotations

import pytest

from route_monitor.divergence import (
    DivergenceTolerances,
    compare_routes,
    haversine_m,
    round_half_up,
    sample_points,
)
from route_monitor.models import GeoPoint
from route_monitor.polyline_codec import encode


def test_identical_paths_have_zero_deviation(make_path) -> None:
    encoded = encode(make_path())
    report = compare_routes(encoded, encoded, compared_to="google")

    assert report is not None
    assert report.avg_deviation_meters == 0
    assert report.max_deviation_meters == 0
    assert report.is_different_route is False
    assert report.compared_to == "google"


def test_parallel_offset_above_avg_threshold_is_different(make_path, shift_east) -> None:
    reference = make_path()
    candidate = shift_east(reference, 510.0)

    report = compare_routes(encode(reference), encode(candidate))

    assert report is not None
    assert report.avg_deviation_meters == pytest.approx(510, abs=2)
    assert report.max_deviation_meters < 1000
    assert report.is_different_route is True


def test_small_offset_stays_same_route(make_path, shift_east) -> None:
    reference = make_path()
    report = compare_routes(encode(reference), encode(shift_east(reference, 120.0)))

    assert report is not None
    assert report.avg_deviation_meters == pytest.approx(120, abs=2)
    assert report.is_different_route is False


def test_single_detour_trips_max_threshold(make_path, shift_east) -> None:
    reference = make_path(count=10)
    candidate = list(reference)
    candidate[5] = shift_east([reference[5]], 1500.0)[0]

    report = compare_routes(encode(reference), encode(candidate))

    assert report is not None
    assert report.avg_deviation_meters < 500
    assert report.max_deviation_meters == pytest.approx(1500, abs=2)
    assert report.max_deviation_meters >= report.avg_deviation_meters
    assert report.is_different_route is True


def test_comparison_is_one_sided(make_path) -> None:
    full = make_path(count=41)
    first_quarter = full[:11]

    contained = compare_routes(encode(full), encode(first_quarter))
    extending = compare_routes(encode(first_quarter), encode(full))

    # A candidate inside a longer reference is not different; the reverse is.
    assert contained is not None and contained.is_different_route is False
    assert contained.max_deviation_meters == 0
    assert extending is not None and extending.is_different_route is True
    assert extending.max_deviation_meters > contained.max_deviation_meters


def test_empty_paths_return_none(make_path) -> None:
    any_path = encode(make_path())
    assert compare_routes(encode([]), any_path) is None
    assert compare_routes(any_path, encode([])) is None


def test_malformed_polyline_returns_none(make_path) -> None:
    any_path = encode(make_path())
    assert compare_routes(any_path, "_p~iF~ps|U_ulLnnq") is None
    assert compare_routes("_p~iF", any_path) is None
    assert compare_routes(any_path, "~" * 250 + "??") is None
    assert compare_routes("~" * 250 + "??", any_path) is None


def test_custom_thresholds_are_respected(make_path, shift_east) -> None:
    reference = make_path()
    candidate = shift_east(reference, 120.0)
    strict = DivergenceTolerances(sample_count=5, avg_threshold_m=100.0, max_threshold_m=1000.0)

    report = compare_routes(encode(reference), encode(candidate), strict)

    assert report is not None and report.is_different_route is True


@pytest.mark.parametrize(
    "kwargs",
    [{"sample_count": 0}, {"avg_threshold_m": -1.0}, {"max_threshold_m": -5.0}],
)
def test_invalid_tolerances_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        DivergenceTolerances(**kwargs)


def test_default_tolerances() -> None:
    tolerances = DivergenceTolerances()
    assert tolerances.sample_count == 12
    assert tolerances.avg_threshold_m == 500.0
    assert tolerances.max_threshold_m == 1000.0


def test_sample_points_spreads_over_whole_path() -> None:
    points = [GeoPoint(float(i), 0.0) for i in range(25)]
    sampled = sample_points(points, 12)
    assert [int(p.lat) for p in sampled] == [0, 2, 4, 7, 9, 11, 13, 15, 17, 20, 22, 24]


def test_sample_points_keeps_short_paths_whole() -> None:
    points = [GeoPoint(float(i), 0.0) for i in range(5)]
    assert sample_points(points, 12) == points
    assert sample_points(points, 1) == [points[0]]


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(0.49) == 0


def test_haversine_one_degree_of_latitude() -> None:
    distance = haversine_m(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
    assert distance == pytest.approx(111_195, abs=1)
    assert haversine_m(GeoPoint(19.0, 72.8), GeoPoint(19.0, 72.8)) == 0.0
