"""Tests for the divergence map CLI helper."""

from __future__ import annotations

from pathlib import Path

import folium
import pytest

from route_monitor.models import DivergenceReport, PollRecord, ProviderFailure, ProviderSuccess
from route_monitor.polyline_codec import encode
from route_monitor.storage import JsonRecordStore
from route_monitor.tools import divergence_map
from route_monitor.tools.divergence_map import build_divergence_map


def _build_record(make_path, shift_east) -> PollRecord:
    path = make_path(count=10)
    return PollRecord(
        id="rec-1",
        timestamp=1_718_000_000_000,
        route_id="andheri-bkc",
        results={
            "google": ProviderSuccess(1500, 12000, encode(path)),
            "tomtom": ProviderSuccess(
                1620,
                12600,
                encode(shift_east(path, 800.0)),
                divergence=DivergenceReport(800, 801, True, "google"),
            ),
            "ola": ProviderFailure("Ola Maps HTTP 503"),
        },
    )


def test_build_divergence_map_saves_html(tmp_path: Path, make_path, shift_east) -> None:
    record = _build_record(make_path, shift_east)
    output_path = tmp_path / "maps" / "andheri-bkc.html"

    map_object = build_divergence_map(record, "google", output_html=output_path)

    assert isinstance(map_object, folium.Map)
    assert output_path.exists()
    html = output_path.read_text(encoding="utf-8")
    assert "#d73027" in html
    assert "avg deviation 800 m" in html


def test_record_without_polylines_is_rejected() -> None:
    record = PollRecord(
        id="rec-2",
        timestamp=1,
        route_id="andheri-bkc",
        results={"google": ProviderSuccess(1500, 12000), "ola": ProviderFailure("x")},
    )
    with pytest.raises(ValueError):
        build_divergence_map(record)


def test_cli_writes_map_for_latest_record(tmp_path: Path, make_path, shift_east) -> None:
    store = JsonRecordStore(tmp_path / "data")
    store.append("andheri-bkc", _build_record(make_path, shift_east))
    output_path = tmp_path / "out.html"

    exit_code = divergence_map.main(
        [
            "--route-id",
            "andheri-bkc",
            "--data-dir",
            str(tmp_path / "data"),
            "--output",
            str(output_path),
        ]
    )

    assert exit_code == 0
    assert output_path.exists()


def test_cli_without_records_fails(tmp_path: Path) -> None:
    assert divergence_map.main(["--route-id", "andheri-bkc", "--data-dir", str(tmp_path)]) == 1
