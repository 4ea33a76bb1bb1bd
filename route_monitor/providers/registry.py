"""Builds the configured set of provider adapters."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

import requests

from ..config import PROVIDER_ORDER
from .base import HTTPProviderAdapter
from .google import GoogleDirectionsAdapter
from .ola import OlaMapsAdapter
from .tomtom import TomTomRoutingAdapter

AdapterFactory = Callable[..., HTTPProviderAdapter]

ADAPTERS: Dict[str, AdapterFactory] = {
    GoogleDirectionsAdapter.provider_id: GoogleDirectionsAdapter,
    TomTomRoutingAdapter.provider_id: TomTomRoutingAdapter,
    OlaMapsAdapter.provider_id: OlaMapsAdapter,
}


def build_default_providers(
    order: Sequence[str] = PROVIDER_ORDER,
    *,
    session: requests.Session | None = None,
) -> List[HTTPProviderAdapter]:
    """Instantiate adapters in ``order`` using keys from config."""

    providers: List[HTTPProviderAdapter] = []
    for provider_id in order:
        factory = ADAPTERS.get(provider_id)
        if factory is None:
            known = ", ".join(sorted(ADAPTERS))
            raise ValueError(f"Unknown provider '{provider_id}' (known: {known})")
        providers.append(factory(session=session))
    return providers


__all__ = ["ADAPTERS", "build_default_providers"]
