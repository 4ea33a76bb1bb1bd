"""Multi-provider poll orchestration.

For every route the configured providers are fetched concurrently, failures
are folded into the record as data, non-reference geometry is checked
against the reference provider, and one immutable record is appended to the
sink. ``PollScheduler`` drives ``PollService.poll_once`` on a fixed interval.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
import logging
import threading
import time
import uuid
from typing import Callable, Dict, List, Optional, Sequence

from .config import DIVERGENCE_WARN_ENABLED, POLL_INTERVAL_MS
from .divergence import DivergenceTolerances, compare_routes
from .errors import SinkError
from .models import (
    RESERVED_RECORD_KEYS,
    PollRecord,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
    RouteConfig,
)
from .providers.base import ProviderAdapter
from .storage import RecordSink

UNKNOWN_ERROR = "Unknown error"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_record_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class PollerConfig:
    providers: Sequence[ProviderAdapter]
    sink: RecordSink
    reference_provider: Optional[str] = None
    tolerances: DivergenceTolerances = field(default_factory=DivergenceTolerances)
    clock: Callable[[], int] = now_ms
    id_factory: Callable[[], str] = new_record_id
    logger: logging.Logger | None = None


class PollService:
    def __init__(self, config: PollerConfig):
        self.config = config
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._provider_ids = self._validate_providers(config.providers)
        reference = config.reference_provider or self._provider_ids[0]
        if reference not in self._provider_ids:
            raise ValueError(
                f"Reference provider '{reference}' is not configured "
                f"(providers: {', '.join(self._provider_ids)})"
            )
        self._reference = reference

    @staticmethod
    def _validate_providers(providers: Sequence[ProviderAdapter]) -> List[str]:
        if not providers:
            raise ValueError("At least one provider must be configured")
        ids = [provider.provider_id for provider in providers]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate provider ids: {ids}")
        reserved = RESERVED_RECORD_KEYS.intersection(ids)
        if reserved:
            raise ValueError(f"Provider ids clash with record keys: {sorted(reserved)}")
        return ids

    @property
    def provider_ids(self) -> List[str]:
        return list(self._provider_ids)

    @property
    def reference_provider(self) -> str:
        return self._reference

    def poll_once(self, routes: Sequence[RouteConfig]) -> List[PollRecord]:
        """Poll every route once. Returns the records that were persisted."""

        self._log.info("Polling %d route(s) ...", len(routes))
        saved: List[PollRecord] = []
        for route in routes:
            try:
                saved.append(self.poll_route(route))
            except SinkError as exc:
                self._log.error(
                    "[%s] Failed to persist poll record; retrying next cycle: %s",
                    route.id,
                    exc,
                )
            except Exception as exc:  # one broken route must not stop the cycle
                self._log.error(
                    "[%s] Poll failed; continuing with next route: %s",
                    route.id,
                    exc,
                    exc_info=True,
                )
        return saved

    def poll_route(self, route: RouteConfig) -> PollRecord:
        """Fetch all providers for ``route`` and append one record to the sink.

        Raises:
            SinkError: If the record cannot be persisted.
        """

        timestamp = self.config.clock()
        results = self._fetch_all(route)
        results = self._annotate_divergence(route, results)
        record = PollRecord(
            id=self.config.id_factory(),
            timestamp=timestamp,
            route_id=route.id,
            results=results,
        )
        self.config.sink.append(route.id, record)
        self._log.info("[%s] Saved - %s", route.id, self._summary_line(results))
        return record

    def _fetch_all(self, route: RouteConfig) -> Dict[str, ProviderResult]:
        providers = self.config.providers

        def fetch_provider(provider: ProviderAdapter) -> ProviderResult:
            try:
                result = provider.fetch(route)
            except Exception as exc:  # provider failures are recorded, not raised
                self._log.warning(
                    "[%s] %s fetch failed: %s", route.id, provider.provider_id, exc
                )
                return ProviderFailure(error=str(exc) or UNKNOWN_ERROR)
            if not isinstance(result, ProviderSuccess):
                self._log.warning(
                    "[%s] %s returned %s instead of a provider result",
                    route.id,
                    provider.provider_id,
                    type(result).__name__,
                )
                return ProviderFailure(error=UNKNOWN_ERROR)
            return result

        with ThreadPoolExecutor(max_workers=len(providers)) as executor:
            futures = [executor.submit(fetch_provider, p) for p in providers]
            wait(futures)
        return {
            provider.provider_id: future.result()
            for provider, future in zip(providers, futures)
        }

    def _annotate_divergence(
        self, route: RouteConfig, results: Dict[str, ProviderResult]
    ) -> Dict[str, ProviderResult]:
        reference = results[self._reference]
        if not isinstance(reference, ProviderSuccess) or not reference.polyline:
            self._log.debug(
                "[%s] Reference %s has no polyline; skipping divergence",
                route.id,
                self._reference,
            )
            return results

        annotated = dict(results)
        for provider_id, result in results.items():
            if provider_id == self._reference:
                continue
            if not isinstance(result, ProviderSuccess) or not result.polyline:
                continue
            report = compare_routes(
                reference.polyline,
                result.polyline,
                self.config.tolerances,
                compared_to=self._reference,
            )
            if report is None:
                continue
            annotated[provider_id] = replace(result, divergence=report)
            if report.is_different_route and DIVERGENCE_WARN_ENABLED:
                self._log.warning(
                    "[%s] %s suggests a DIFFERENT ROUTE than %s "
                    "(avg deviation: %dm, max: %dm)",
                    route.id,
                    provider_id,
                    self._reference,
                    report.avg_deviation_meters,
                    report.max_deviation_meters,
                )
        return annotated

    @staticmethod
    def _summary_line(results: Dict[str, ProviderResult]) -> str:
        parts = []
        for provider_id, result in results.items():
            if isinstance(result, ProviderSuccess):
                parts.append(f"{provider_id}: {result.duration_seconds}s")
            else:
                parts.append(f"{provider_id}: ERR")
        return " | ".join(parts)


class PollScheduler:
    """Runs a poll cycle immediately and then once per interval."""

    def __init__(
        self,
        service: PollService,
        routes: Sequence[RouteConfig],
        interval_ms: int = POLL_INTERVAL_MS,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._service = service
        self._routes = list(routes)
        self._interval_s = interval_ms / 1000.0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.cycles_completed = 0

    def start(self) -> None:
        """Start polling on a background daemon thread."""

        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="route-poller", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def run_forever(self) -> None:
        """Poll until :meth:`stop` is called. Blocks the calling thread."""

        logging.info(
            "Poller started: %d route(s), interval %.0fs",
            len(self._routes),
            self._interval_s,
        )
        while not self._stop.is_set():
            self._run_cycle()
            if self._stop.wait(self._interval_s):
                break
        logging.info("Poller stopped after %d cycle(s)", self.cycles_completed)

    def _run_cycle(self) -> None:
        try:
            self._service.poll_once(self._routes)
        except Exception as exc:  # keep the schedule alive
            logging.error("Poll cycle failed: %s", exc, exc_info=True)
        finally:
            self.cycles_completed += 1


__all__ = [
    "PollScheduler",
    "PollService",
    "PollerConfig",
    "UNKNOWN_ERROR",
    "new_record_id",
    "now_ms",
]
