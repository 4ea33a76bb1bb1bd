"""Ola Maps Directions API adapter.

The endpoint is a POST that takes every parameter in the query string and no
body. Leg durations and distances are plain numbers, not ``{value}`` objects.
"""

from __future__ import annotations

from typing import Any, Dict

from ..config import OLA_DIRECTIONS_URL, OLA_MAPS_API_KEY
from ..errors import ProviderNoRouteError, ProviderResponseError
from ..models import ProviderSuccess, RouteConfig
from .base import HTTPProviderAdapter, format_latlng


class OlaMapsAdapter(HTTPProviderAdapter):
    """Driving directions from Ola Maps."""

    provider_id = "ola"
    display_name = "Ola Maps"

    def __init__(self, api_key: str = OLA_MAPS_API_KEY, **kwargs: Any) -> None:
        super().__init__(api_key, **kwargs)
        self._url = OLA_DIRECTIONS_URL

    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        params = {
            "api_key": self._require_key(),
            "origin": format_latlng(route.origin),
            "destination": format_latlng(route.destination),
            "steps": "true",
            "overview": "full",
        }
        data = self._request_json("POST", self._url, params=params)
        return parse_directions(data)


def parse_directions(data: Dict[str, Any]) -> ProviderSuccess:
    """Normalise an Ola Maps directions payload."""

    status = data.get("status")
    if status != "SUCCESS":
        raise ProviderResponseError(f"Ola Maps API error: {status or 'missing status'}")
    routes = data.get("routes")
    if not routes:
        raise ProviderNoRouteError("Ola Maps API returned no routes")
    try:
        first_route = routes[0]
        leg = first_route["legs"][0]
        duration = leg["duration"]
        distance = leg["distance"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderResponseError(f"Ola Maps response missing field: {exc}") from exc
    polyline = first_route.get("overview_polyline")
    return ProviderSuccess(
        duration_seconds=duration,
        distance_meters=distance,
        polyline=polyline if isinstance(polyline, str) and polyline else None,
    )


__all__ = ["OlaMapsAdapter", "parse_directions"]
