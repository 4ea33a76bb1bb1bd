"""Shared HTTP response helpers for routing provider calls."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..errors import (
    ProviderAuthError,
    ProviderFetchError,
    ProviderResponseError,
)

LOGGER = logging.getLogger(__name__)

__all__ = [
    "check_response_status",
    "extract_error",
    "parse_json",
]


def check_response_status(response: requests.Response, context: str) -> None:
    """Raise a provider error for any non-2xx response."""

    status = response.status_code
    if 200 <= status < 300:
        return
    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message}: {detail}" if detail else message

    if status in (401, 403):
        raise ProviderAuthError(with_detail(f"{context} HTTP {status}"))
    raise ProviderFetchError(with_detail(f"{context} HTTP {status}"))


def parse_json(response: requests.Response, context: str) -> Dict[str, Any]:
    """Return the JSON object body or raise :class:`ProviderResponseError`."""

    data = _safe_json(response)
    if not isinstance(data, dict):
        raise ProviderResponseError(f"{context} returned a non-JSON-object body")
    return data


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with provider error info if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except ValueError as exc:
        LOGGER.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from the error shapes used by the providers."""

    parts: List[str] = []
    status = data.get("status")
    if isinstance(status, str) and status not in ("OK", "SUCCESS"):
        parts.append(status)
    for key in ("error_message", "message", "reason"):
        value = data.get(key)
        if value:
            parts.append(str(value))
    error = data.get("error")
    if isinstance(error, dict):
        description = error.get("description") or error.get("message")
        if description:
            parts.append(str(description))
    elif error:
        parts.append(str(error))
    detailed = data.get("detailedError")
    if isinstance(detailed, dict) and detailed.get("message"):
        parts.append(str(detailed["message"]))
    return parts
