"""Central error types used across the application."""

from __future__ import annotations


class RouteMonitorError(RuntimeError):
    """Base error for route monitor failures."""


class ProviderFetchError(RouteMonitorError):
    """Base error for a routing provider call that produced no usable result."""


class ProviderAuthError(ProviderFetchError):
    """Raised when a provider key is missing or rejected."""


class ProviderNoRouteError(ProviderFetchError):
    """Raised when a provider answers but finds no route for the pair."""


class ProviderResponseError(ProviderFetchError):
    """Raised when a provider payload is malformed or reports an error status."""


class MalformedEncodingError(ValueError):
    """Raised when an encoded polyline is truncated or contains invalid characters."""


class SinkError(RouteMonitorError):
    """Raised when a poll record cannot be persisted."""


class RouteConfigError(RouteMonitorError):
    """Raised when the route configuration file is missing or invalid."""


__all__ = [
    "RouteMonitorError",
    "ProviderFetchError",
    "ProviderAuthError",
    "ProviderNoRouteError",
    "ProviderResponseError",
    "MalformedEncodingError",
    "SinkError",
    "RouteConfigError",
]
