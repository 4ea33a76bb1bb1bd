"""Value types shared by the codec, the divergence detector and the poller.

Every type here is immutable. ``PollRecord`` and the provider results convert
to and from the camelCase JSON shape written to the record store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

Number = Union[int, float]
LatLng = Tuple[float, float]

RESERVED_RECORD_KEYS = frozenset({"id", "timestamp", "routeId"})


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS-84 coordinate in degrees."""

    lat: float
    lng: float

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GeoPoint":
        return cls(lat=float(payload["lat"]), lng=float(payload["lng"]))

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def as_tuple(self) -> LatLng:
        return self.lat, self.lng


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Static origin/destination pair polled on every cycle."""

    id: str
    label: str
    origin: GeoPoint
    destination: GeoPoint


@dataclass(frozen=True, slots=True)
class DivergenceReport:
    """How far a candidate path strays from the reference provider's path."""

    avg_deviation_meters: int
    max_deviation_meters: int
    is_different_route: bool
    compared_to: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DivergenceReport":
        return cls(
            avg_deviation_meters=int(payload["avgDeviationMeters"]),
            max_deviation_meters=int(payload["maxDeviationMeters"]),
            is_different_route=bool(payload["isDifferentRoute"]),
            compared_to=str(payload.get("comparedTo", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "comparedTo": self.compared_to,
            "avgDeviationMeters": self.avg_deviation_meters,
            "maxDeviationMeters": self.max_deviation_meters,
            "isDifferentRoute": self.is_different_route,
        }


@dataclass(frozen=True, slots=True)
class ProviderSuccess:
    """Normalised result of one successful provider call."""

    duration_seconds: Number
    distance_meters: Number
    polyline: Optional[str] = None
    extras: Mapping[str, Number] = field(default_factory=dict)
    divergence: Optional[DivergenceReport] = None

    ok = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "durationSeconds": self.duration_seconds,
            "distanceMeters": self.distance_meters,
            "polyline": self.polyline,
        }
        payload.update(self.extras)
        if self.divergence is not None:
            payload["routeDivergence"] = self.divergence.to_dict()
        return payload


@dataclass(frozen=True, slots=True)
class ProviderFailure:
    """A provider call that failed; only the error description is kept."""

    error: str

    ok = False

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error}


ProviderResult = Union[ProviderSuccess, ProviderFailure]

_SUCCESS_KEYS = {"durationSeconds", "distanceMeters", "polyline", "routeDivergence"}


def provider_result_from_dict(payload: Mapping[str, Any]) -> ProviderResult:
    """Rebuild a provider result from its stored JSON form."""

    if "error" in payload:
        return ProviderFailure(error=str(payload["error"]))
    divergence_payload = payload.get("routeDivergence")
    extras = {
        key: value
        for key, value in payload.items()
        if key not in _SUCCESS_KEYS and isinstance(value, (int, float))
    }
    return ProviderSuccess(
        duration_seconds=payload["durationSeconds"],
        distance_meters=payload["distanceMeters"],
        polyline=payload.get("polyline"),
        extras=extras,
        divergence=(
            DivergenceReport.from_dict(divergence_payload)
            if isinstance(divergence_payload, Mapping)
            else None
        ),
    )


@dataclass(frozen=True, slots=True)
class PollRecord:
    """Outcome of polling every provider for one route at one instant."""

    id: str
    timestamp: int
    route_id: str
    results: Mapping[str, ProviderResult]

    def __post_init__(self) -> None:
        clashes = RESERVED_RECORD_KEYS.intersection(self.results)
        if clashes:
            raise ValueError(f"Provider ids clash with record keys: {sorted(clashes)}")
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    @property
    def provider_ids(self) -> Tuple[str, ...]:
        return tuple(self.results)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "routeId": self.route_id,
        }
        for provider_id, result in self.results.items():
            payload[provider_id] = result.to_dict()
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PollRecord":
        results = {
            key: provider_result_from_dict(value)
            for key, value in payload.items()
            if key not in RESERVED_RECORD_KEYS and isinstance(value, Mapping)
        }
        return cls(
            id=str(payload["id"]),
            timestamp=int(payload["timestamp"]),
            route_id=str(payload["routeId"]),
            results=results,
        )


__all__ = [
    "DivergenceReport",
    "GeoPoint",
    "LatLng",
    "PollRecord",
    "ProviderFailure",
    "ProviderResult",
    "ProviderSuccess",
    "RESERVED_RECORD_KEYS",
    "RouteConfig",
    "provider_result_from_dict",
]
