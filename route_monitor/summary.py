"""Per-route summary statistics over stored poll records.

Pure transformation: given records for one route and the reference provider
it produces the figures a dashboard shows (latest durations, percentage
deltas against the reference, averages and the divergence count).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .models import PollRecord, ProviderSuccess


@dataclass(slots=True)
class ProviderSummary:
    provider_id: str
    latest_duration_seconds: Optional[float] = None
    latest_distance_meters: Optional[float] = None
    latest_delta_pct: Optional[float] = None
    avg_delta_pct: Optional[float] = None
    different_route_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider_id,
            "latestDurationSeconds": self.latest_duration_seconds,
            "latestDistanceMeters": self.latest_distance_meters,
            "latestDeltaPct": self.latest_delta_pct,
            "avgDeltaPct": self.avg_delta_pct,
            "differentRouteCount": self.different_route_count,
        }


@dataclass(slots=True)
class RouteSummary:
    reference_provider: str
    record_count: int = 0
    latest_timestamp: Optional[int] = None
    divergent_record_count: int = 0
    providers: List[ProviderSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "referenceProvider": self.reference_provider,
            "recordCount": self.record_count,
            "latestTimestamp": self.latest_timestamp,
            "divergentRecordCount": self.divergent_record_count,
            "providers": [p.to_dict() for p in self.providers],
        }


def pct_delta(value: Optional[float], reference: Optional[float]) -> Optional[float]:
    """Return ``(value - reference) / reference * 100`` or None when undefined."""

    if value is None or reference is None or reference <= 0:
        return None
    return (value - reference) / reference * 100.0


def _duration(record: PollRecord, provider_id: str) -> Optional[float]:
    result = record.results.get(provider_id)
    if isinstance(result, ProviderSuccess):
        return float(result.duration_seconds)
    return None


def _is_different(record: PollRecord, provider_id: str) -> bool:
    result = record.results.get(provider_id)
    return (
        isinstance(result, ProviderSuccess)
        and result.divergence is not None
        and result.divergence.is_different_route
    )


def _provider_order(records: Sequence[PollRecord], reference: str) -> List[str]:
    order: List[str] = [reference]
    for record in records:
        for provider_id in record.provider_ids:
            if provider_id not in order:
                order.append(provider_id)
    return order


def _summarize_provider(
    records: Sequence[PollRecord], provider_id: str, reference: str
) -> ProviderSummary:
    summary = ProviderSummary(provider_id=provider_id)
    latest = records[-1]
    latest_result = latest.results.get(provider_id)
    if isinstance(latest_result, ProviderSuccess):
        summary.latest_duration_seconds = float(latest_result.duration_seconds)
        summary.latest_distance_meters = float(latest_result.distance_meters)
    summary.different_route_count = sum(
        1 for record in records if _is_different(record, provider_id)
    )
    if provider_id == reference:
        return summary

    summary.latest_delta_pct = pct_delta(
        _duration(latest, provider_id), _duration(latest, reference)
    )
    deltas = [
        delta
        for delta in (
            pct_delta(_duration(r, provider_id), _duration(r, reference))
            for r in records
        )
        if delta is not None
    ]
    if deltas:
        summary.avg_delta_pct = sum(deltas) / len(deltas)
    return summary


def summarize_records(
    records: Sequence[PollRecord], reference_provider: str
) -> RouteSummary:
    """Build a :class:`RouteSummary` from records ordered oldest first."""

    summary = RouteSummary(reference_provider=reference_provider)
    if not records:
        return summary
    summary.record_count = len(records)
    summary.latest_timestamp = records[-1].timestamp
    providers = _provider_order(records, reference_provider)
    summary.divergent_record_count = sum(
        1 for record in records if any(_is_different(record, p) for p in providers)
    )
    summary.providers = [
        _summarize_provider(records, provider_id, reference_provider)
        for provider_id in providers
    ]
    return summary


__all__ = ["ProviderSummary", "RouteSummary", "pct_delta", "summarize_records"]
