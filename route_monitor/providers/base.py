"""Provider adapter contract and the shared HTTP plumbing behind it."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    HTTP_BACKOFF_FACTOR,
    HTTP_MAX_RETRIES,
    HTTP_POOL_CONNECTIONS,
    HTTP_POOL_MAXSIZE,
    HTTP_USER_AGENT,
    REQUEST_TIMEOUT,
)
from ..errors import ProviderAuthError, ProviderFetchError
from ..models import GeoPoint, ProviderSuccess, RouteConfig
from .response_handling import check_response_status, parse_json

LOGGER = logging.getLogger(__name__)

_shared_session: requests.Session | None = None
_shared_session_lock = threading.Lock()


class ProviderAdapter(Protocol):
    """Anything that can turn a route into a normalised provider result."""

    provider_id: str

    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        """Return the provider's current route, or raise ``ProviderFetchError``."""
        ...


def format_latlng(point: GeoPoint) -> str:
    return f"{point.lat},{point.lng}"


def create_provider_session(
    max_retries: int = HTTP_MAX_RETRIES,
    backoff_factor: float = HTTP_BACKOFF_FACTOR,
) -> requests.Session:
    """Build a pooled session that retries 5xx responses for GET and POST.

    Once retries are exhausted the last response is returned rather than
    raised, so ``check_response_status`` can report the provider's detail.
    """

    retry = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET", "POST"],
        raise_on_status=False,
    )
    transport = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=HTTP_POOL_MAXSIZE,
        max_retries=retry,
    )
    session = requests.Session()
    session.mount("https://", transport)
    session.mount("http://", transport)
    session.headers["Accept"] = "application/json"
    return session


def shared_session() -> requests.Session:
    """Return the process-wide provider session, creating it on first use."""

    global _shared_session
    with _shared_session_lock:
        if _shared_session is None:
            _shared_session = create_provider_session()
        return _shared_session


class HTTPProviderAdapter(ABC):
    """Base class for adapters that call a JSON HTTP API with an API key."""

    provider_id = ""
    display_name = ""

    def __init__(
        self,
        api_key: str,
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._session = session or shared_session()
        self._timeout = timeout
        self._headers = {"User-Agent": f"{HTTP_USER_AGENT} ({self.provider_id})"}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider_id={self.provider_id!r})"

    @abstractmethod
    def fetch(self, route: RouteConfig) -> ProviderSuccess:
        """Return the provider's current route for ``route``."""

    def _require_key(self) -> str:
        if not self._api_key:
            raise ProviderAuthError(f"{self.display_name} API key is not configured")
        return self._api_key

    def _request_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object body."""

        context = self.display_name
        LOGGER.debug("%s %s %s", context, method, url)
        try:
            response = self._session.request(
                method,
                url,
                params=dict(params or {}),
                headers=self._headers,
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            raise ProviderFetchError(
                f"{context} request timed out after {self._timeout}s"
            ) from exc
        except requests.RequestException as exc:
            raise ProviderFetchError(
                f"{context} request failed: {exc.__class__.__name__}"
            ) from exc
        check_response_status(response, context)
        return parse_json(response, context)


__all__ = [
    "HTTPProviderAdapter",
    "ProviderAdapter",
    "create_provider_session",
    "format_latlng",
    "shared_session",
]
