"""Tests for the encoded polyline codec."""

from __future__ import annotations

import random

import polyline
import pytest

from route_monitor.errors import MalformedEncodingError
from route_monitor.models import GeoPoint
from route_monitor.polyline_codec import decode, encode

REFERENCE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]
REFERENCE_ENCODED = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
QUANTUM = 0.5e-5


def _random_points(seed: int, count: int) -> list[tuple[float, float]]:
    rng = random.Random(seed)
    return [(rng.uniform(-90, 90), rng.uniform(-180, 180)) for _ in range(count)]


def test_encode_matches_published_two_point_vector() -> None:
    assert encode([(38.5, -120.2), (40.7, -120.95)]) == "_p~iF~ps|U_ulLnnqC"


def test_encode_accepts_geopoints() -> None:
    points = [GeoPoint(lat, lng) for lat, lng in REFERENCE_POINTS]
    assert encode(points) == REFERENCE_ENCODED


def test_decode_published_vector() -> None:
    decoded = decode(REFERENCE_ENCODED)
    assert [p.as_tuple() for p in decoded] == pytest.approx(REFERENCE_POINTS)
    assert all(isinstance(p, GeoPoint) for p in decoded)


def test_empty_input_round_trips() -> None:
    assert encode([]) == ""
    assert decode("") == []


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_round_trip_within_one_quantisation_unit(seed: int) -> None:
    points = _random_points(seed, 60)
    decoded = decode(encode(points))
    assert len(decoded) == len(points)
    for original, restored in zip(points, decoded):
        assert abs(original[0] - restored.lat) <= QUANTUM + 1e-9
        assert abs(original[1] - restored.lng) <= QUANTUM + 1e-9


def test_reencoding_a_decoded_string_is_stable() -> None:
    points = _random_points(3, 40) + [(0.0, 0.0), (-0.000004, 0.000006), (90.0, -180.0)]
    encoded = encode(points)
    assert encode(decode(encoded)) == encoded
    assert decode(encode(decode(encoded))) == decode(encoded)


def test_matches_polyline_library_encoding() -> None:
    points = _random_points(11, 80)
    assert encode(points) == polyline.encode(points, 5)


def test_decodes_polyline_library_output() -> None:
    points = _random_points(12, 50)
    ours = [p.as_tuple() for p in decode(polyline.encode(points, 5))]
    theirs = polyline.decode(polyline.encode(points, 5), 5)
    assert ours == pytest.approx([tuple(pair) for pair in theirs], abs=1e-9)


@pytest.mark.parametrize(
    "encoded",
    [
        "_p~iF~ps|U_ulLnnq",  # ends inside a continuation group
        "_p~iF",  # latitude without longitude
        "_p~iF~ps|U_ulL",  # second point missing its longitude
    ],
)
def test_truncated_input_raises(encoded: str) -> None:
    with pytest.raises(MalformedEncodingError):
        decode(encoded)


def test_invalid_character_raises() -> None:
    with pytest.raises(MalformedEncodingError):
        decode("_p~iF ps|U")


def test_overlong_value_raises() -> None:
    # Every character is in the alphabet but the value never terminates sanely.
    with pytest.raises(MalformedEncodingError):
        decode("~" * 250 + "??")
    with pytest.raises(MalformedEncodingError):
        decode("~~~~~~~?_p~iF")


def test_longest_valid_coordinates_decode() -> None:
    points = [(-90.0, -180.0), (90.0, 180.0), (-90.0, -180.0)]
    assert [p.as_tuple() for p in decode(encode(points))] == points


def test_malformed_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        decode("?")
