"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable routes, synthetic paths and
fake providers/sinks shared by the poller, storage and API tests.
"""
from __future__ import annotations

import math
import os
import sys
import threading
from typing import Dict, List, Optional, Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from route_monitor.errors import SinkError
from route_monitor.models import GeoPoint, PollRecord, ProviderSuccess, RouteConfig

METERS_PER_DEGREE = 6_371_000.0 * math.pi / 180.0


# --- Path helpers ----------------------------------------------------
def meridian_path(count: int = 41, start_lat: float = 19.0, lng: float = 72.85, step: float = 0.0025) -> List[GeoPoint]:
    """Straight south-to-north path; ``step`` degrees (~278 m) between points."""
    return [GeoPoint(round(start_lat + i * step, 5), lng) for i in range(count)]


def offset_east(points: Sequence[GeoPoint], meters: float) -> List[GeoPoint]:
    """Shift every point ``meters`` east, i.e. perpendicular to a meridian path."""
    shifted = []
    for p in points:
        d_lng = meters / (METERS_PER_DEGREE * math.cos(math.radians(p.lat)))
        shifted.append(GeoPoint(p.lat, p.lng + d_lng))
    return shifted


# --- Fakes -------------------------------------------------------------
class FakeProvider:
    """Provider adapter double returning a fixed result or raising."""

    def __init__(
        self,
        provider_id: str,
        result: Optional[ProviderSuccess] = None,
        error: Optional[BaseException] = None,
        barrier: Optional[threading.Barrier] = None,
    ) -> None:
        self.provider_id = provider_id
        self._result = result
        self._error = error
        self._barrier = barrier
        self.calls: List[str] = []

    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        self.calls.append(route.id)
        if self._barrier is not None:
            self._barrier.wait()
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result


class InMemorySink:
    """Record sink keeping records per route in memory."""

    def __init__(self, failing_routes: Sequence[str] = ()) -> None:
        self.records: Dict[str, List[PollRecord]] = {}
        self._failing = set(failing_routes)

    def append(self, route_id: str, record: PollRecord) -> None:
        if route_id in self._failing:
            raise SinkError(f"disk full for {route_id}")
        self.records.setdefault(route_id, []).append(record)

    def read_all(self, route_id: str) -> List[PollRecord]:
        return list(self.records.get(route_id, []))

    def read_latest(self, route_id: str, n: int) -> List[PollRecord]:
        if n <= 0:
            return []
        return self.read_all(route_id)[-n:]


def make_route(route_id: str = "andheri-bkc") -> RouteConfig:
    return RouteConfig(
        id=route_id,
        label=route_id.replace("-", " ").title(),
        origin=GeoPoint(19.0, 72.85),
        destination=GeoPoint(19.1, 72.85),
    )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def route() -> RouteConfig:
    return make_route()


@pytest.fixture
def sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def make_sink():
    return InMemorySink


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def make_path():
    return meridian_path


@pytest.fixture
def shift_east():
    return offset_east


@pytest.fixture
def route_factory():
    return make_route
