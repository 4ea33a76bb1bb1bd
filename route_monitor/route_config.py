"""Load the static list of monitored routes from ``routes.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Union

from .config import ROUTES_FILE
from .errors import RouteConfigError
from .models import GeoPoint, RouteConfig
from .storage import ROUTE_ID_PATTERN

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _parse_point(entry: Mapping[str, Any], key: str, position: int) -> GeoPoint:
    raw = entry.get(key)
    if not isinstance(raw, Mapping):
        raise RouteConfigError(f"Route #{position} is missing '{key}'")
    try:
        point = GeoPoint.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise RouteConfigError(
            f"Route #{position} has an invalid '{key}': {raw!r}"
        ) from exc
    if not (-90.0 <= point.lat <= 90.0 and -180.0 <= point.lng <= 180.0):
        raise RouteConfigError(f"Route #{position} '{key}' is out of range: {raw!r}")
    return point


def parse_routes(payload: Any) -> List[RouteConfig]:
    """Validate a decoded ``routes.json`` payload."""

    if not isinstance(payload, list):
        raise RouteConfigError("Route configuration must be a JSON array")
    routes: List[RouteConfig] = []
    seen: set[str] = set()
    for position, entry in enumerate(payload, start=1):
        if not isinstance(entry, Mapping):
            raise RouteConfigError(f"Route #{position} must be an object")
        route_id = entry.get("id")
        if not isinstance(route_id, str) or not ROUTE_ID_PATTERN.match(route_id):
            raise RouteConfigError(
                f"Route #{position} needs an 'id' of letters, digits, '-' or '_'"
            )
        if route_id in seen:
            raise RouteConfigError(f"Duplicate route id '{route_id}'")
        seen.add(route_id)
        label = entry.get("label") or route_id
        routes.append(
            RouteConfig(
                id=route_id,
                label=str(label),
                origin=_parse_point(entry, "origin", position),
                destination=_parse_point(entry, "destination", position),
            )
        )
    return routes


def load_routes(path: PathLike = ROUTES_FILE) -> List[RouteConfig]:
    """Read and validate the route configuration file."""

    file_path = Path(path)
    try:
        with file_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise RouteConfigError(f"Route configuration not found: {file_path}") from exc
    except ValueError as exc:
        raise RouteConfigError(f"Route configuration is not valid JSON: {exc}") from exc
    routes = parse_routes(payload)
    LOGGER.info("Loaded %d route(s) from %s", len(routes), file_path)
    return routes


__all__ = ["load_routes", "parse_routes"]
