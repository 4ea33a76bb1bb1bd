"""TomTom Routing API adapter.

TomTom returns raw ``{latitude, longitude}`` vertices, which are encoded here
so every stored result carries the same polyline format.
"""

from __future__ import annotations

from typing import Any, Dict

from ..config import TOMTOM_API_KEY, TOMTOM_ROUTING_URL
from ..errors import ProviderNoRouteError, ProviderResponseError
from ..models import GeoPoint, ProviderSuccess, RouteConfig
from ..polyline_codec import encode
from .base import HTTPProviderAdapter, format_latlng


class TomTomRoutingAdapter(HTTPProviderAdapter):
    """Traffic-aware car routing from TomTom."""

    provider_id = "tomtom"
    display_name = "TomTom"

    def __init__(self, api_key: str = TOMTOM_API_KEY, **kwargs: Any) -> None:
        super().__init__(api_key, **kwargs)
        self._base_url = TOMTOM_ROUTING_URL.rstrip("/")

    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        locations = f"{format_latlng(route.origin)}:{format_latlng(route.destination)}"
        params = {
            "key": self._require_key(),
            "traffic": "true",
            "travelMode": "car",
        }
        data = self._request_json(
            "GET", f"{self._base_url}/{locations}/json", params=params
        )
        return parse_calculate_route(data)


def parse_calculate_route(data: Dict[str, Any]) -> ProviderSuccess:
    """Normalise a calculateRoute payload, encoding the first leg's points."""

    routes = data.get("routes")
    if not routes:
        raise ProviderNoRouteError("TomTom API returned no routes")
    try:
        first_route = routes[0]
        summary = first_route["summary"]
        duration = summary["travelTimeInSeconds"]
        distance = summary["lengthInMeters"]
        delay = summary.get("trafficDelayInSeconds") or 0
        legs = first_route.get("legs") or [{}]
        points = [
            GeoPoint(float(raw["latitude"]), float(raw["longitude"]))
            for raw in legs[0].get("points") or []
        ]
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ProviderResponseError(f"TomTom response missing field: {exc}") from exc
    return ProviderSuccess(
        duration_seconds=duration,
        distance_meters=distance,
        polyline=encode(points) or None,
        extras={"trafficDelaySeconds": delay},
    )


__all__ = ["TomTomRoutingAdapter", "parse_calculate_route"]
