"""Google Directions API adapter."""

from __future__ import annotations

from typing import Any, Dict

from ..config import GOOGLE_DIRECTIONS_URL, GOOGLE_MAPS_API_KEY
from ..errors import ProviderNoRouteError, ProviderResponseError
from ..models import ProviderSuccess, RouteConfig
from .base import HTTPProviderAdapter, format_latlng

_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


class GoogleDirectionsAdapter(HTTPProviderAdapter):
    """Traffic-aware driving directions from Google Maps."""

    provider_id = "google"
    display_name = "Google"

    def __init__(self, api_key: str = GOOGLE_MAPS_API_KEY, **kwargs: Any) -> None:
        super().__init__(api_key, **kwargs)
        self._url = GOOGLE_DIRECTIONS_URL

    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        params = {
            "origin": format_latlng(route.origin),
            "destination": format_latlng(route.destination),
            "departure_time": "now",
            "key": self._require_key(),
        }
        data = self._request_json("GET", self._url, params=params)
        return parse_directions(data)


def parse_directions(data: Dict[str, Any]) -> ProviderSuccess:
    """Normalise a Directions API payload."""

    status = data.get("status")
    if status != "OK":
        detail = data.get("error_message") or ""
        message = f"Google API error: {status} {detail}".strip()
        if status in _NO_ROUTE_STATUSES:
            raise ProviderNoRouteError(message)
        raise ProviderResponseError(message)
    try:
        first_route = data["routes"][0]
        leg = first_route["legs"][0]
        duration = leg["duration"]["value"]
        in_traffic = (leg.get("duration_in_traffic") or {}).get("value")
        distance = leg["distance"]["value"]
        polyline = (first_route.get("overview_polyline") or {}).get("points")
    except (KeyError, IndexError, TypeError) as exc:
        raise ProviderResponseError(f"Google response missing field: {exc}") from exc
    return ProviderSuccess(
        duration_seconds=in_traffic if in_traffic is not None else duration,
        distance_meters=distance,
        polyline=polyline or None,
        extras={"durationNoTrafficSeconds": duration},
    )


__all__ = ["GoogleDirectionsAdapter", "parse_directions"]
