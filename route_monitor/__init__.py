"""Route ETA monitor package."""

from .divergence import DivergenceTolerances, compare_routes
from .errors import (
    MalformedEncodingError,
    ProviderFetchError,
    RouteConfigError,
    SinkError,
)
from .main import main
from .models import (
    DivergenceReport,
    GeoPoint,
    PollRecord,
    ProviderFailure,
    ProviderSuccess,
    RouteConfig,
)
from .poller import PollerConfig, PollScheduler, PollService
from .polyline_codec import decode, encode
from .storage import JsonRecordStore

__all__ = [
    "main",
    "decode",
    "encode",
    "compare_routes",
    "DivergenceTolerances",
    "DivergenceReport",
    "GeoPoint",
    "PollRecord",
    "ProviderFailure",
    "ProviderSuccess",
    "RouteConfig",
    "PollerConfig",
    "PollScheduler",
    "PollService",
    "JsonRecordStore",
    "MalformedEncodingError",
    "ProviderFetchError",
    "RouteConfigError",
    "SinkError",
]
