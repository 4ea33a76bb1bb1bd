"""Routing provider adapters (Google, TomTom, Ola Maps) and shared HTTP helpers."""

from .base import (
    HTTPProviderAdapter,
    ProviderAdapter,
    create_provider_session,
    shared_session,
)
from .google import GoogleDirectionsAdapter
from .ola import OlaMapsAdapter
from .registry import ADAPTERS, build_default_providers
from .tomtom import TomTomRoutingAdapter

__all__ = [
    "ADAPTERS",
    "GoogleDirectionsAdapter",
    "HTTPProviderAdapter",
    "OlaMapsAdapter",
    "ProviderAdapter",
    "TomTomRoutingAdapter",
    "build_default_providers",
    "create_provider_session",
    "shared_session",
]
