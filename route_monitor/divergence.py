"""Route divergence detection between two encoded polylines.

The candidate path is sampled at evenly spaced vertices and every sample is
matched to its nearest reference vertex by great-circle distance. The check
is one-sided: a candidate that runs along part of a longer reference path is
not flagged, a candidate that leaves the reference corridor is.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import (
    DIVERGENCE_AVG_THRESHOLD_M,
    DIVERGENCE_MAX_THRESHOLD_M,
    DIVERGENCE_SAMPLE_COUNT,
)
from .errors import MalformedEncodingError
from .models import DivergenceReport, GeoPoint
from .polyline_codec import decode

LOGGER = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0

DegreeArray = NDArray[np.float64]


@dataclass(frozen=True, slots=True)
class DivergenceTolerances:
    """Sampling and threshold settings for :func:`compare_routes`."""

    sample_count: int = DIVERGENCE_SAMPLE_COUNT
    avg_threshold_m: float = DIVERGENCE_AVG_THRESHOLD_M
    max_threshold_m: float = DIVERGENCE_MAX_THRESHOLD_M

    def __post_init__(self) -> None:
        if self.sample_count < 1:
            raise ValueError("sample_count must be >= 1")
        if self.avg_threshold_m < 0 or self.max_threshold_m < 0:
            raise ValueError("thresholds must be non-negative")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""

    return int(math.floor(value + 0.5))


def sample_points(points: Sequence[GeoPoint], n: int) -> List[GeoPoint]:
    """Return ``n`` evenly spaced points including the first and last one."""

    if n < 1:
        raise ValueError("n must be >= 1")
    if len(points) <= n:
        return list(points)
    if n == 1:
        return [points[0]]
    step = (len(points) - 1) / (n - 1)
    return [points[round_half_up(i * step)] for i in range(n)]


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in metres between two points."""

    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    h = min(max(h, 0.0), 1.0)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _as_radians(points: Sequence[GeoPoint]) -> DegreeArray:
    return np.radians(np.asarray([(p.lat, p.lng) for p in points], dtype=float))


def _min_distances_m(
    samples: Sequence[GeoPoint], reference: Sequence[GeoPoint]
) -> DegreeArray:
    """For each sample, the haversine distance to its nearest reference point."""

    s = _as_radians(samples)[:, np.newaxis, :]
    r = _as_radians(reference)[np.newaxis, :, :]
    d_lat = r[..., 0] - s[..., 0]
    d_lng = r[..., 1] - s[..., 1]
    h = (
        np.sin(d_lat / 2) ** 2
        + np.cos(s[..., 0]) * np.cos(r[..., 0]) * np.sin(d_lng / 2) ** 2
    )
    h = np.clip(h, 0.0, 1.0)
    distances = EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
    return distances.min(axis=1)


def compare_routes(
    reference_encoded: str,
    candidate_encoded: str,
    tolerances: Optional[DivergenceTolerances] = None,
    *,
    compared_to: str = "",
) -> Optional[DivergenceReport]:
    """Compare a candidate polyline against the reference polyline.

    Args:
        reference_encoded: Encoded path of the reference provider.
        candidate_encoded: Encoded path of the provider being checked.
        tolerances: Sampling and threshold settings; defaults from config.
        compared_to: Reference provider id stored on the report.

    Returns:
        A :class:`DivergenceReport`, or ``None`` when either path is empty or
        cannot be decoded.
    """

    tolerances = tolerances or DivergenceTolerances()
    try:
        reference = decode(reference_encoded)
        candidate = decode(candidate_encoded)
    except MalformedEncodingError as exc:
        LOGGER.debug("Skipping divergence check for malformed polyline: %s", exc)
        return None
    if not reference or not candidate:
        return None

    samples = sample_points(candidate, tolerances.sample_count)
    deviations = _min_distances_m(samples, reference)
    avg_deviation = float(deviations.mean())
    max_deviation = float(deviations.max())

    return DivergenceReport(
        avg_deviation_meters=round_half_up(avg_deviation),
        max_deviation_meters=round_half_up(max_deviation),
        is_different_route=(
            avg_deviation > tolerances.avg_threshold_m
            or max_deviation > tolerances.max_threshold_m
        ),
        compared_to=compared_to,
    )


__all__ = [
    "DivergenceTolerances",
    "EARTH_RADIUS_M",
    "compare_routes",
    "haversine_m",
    "round_half_up",
    "sample_points",
]
