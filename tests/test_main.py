import importlib
import json
from pathlib import Path

from route_monitor.errors import ProviderFetchError
from route_monitor.models import ProviderSuccess
from route_monitor.polyline_codec import encode

main_module = importlib.import_module("route_monitor.main")


def _write_routes(tmp_path: Path) -> Path:
    path = tmp_path / "routes.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "andheri-bkc",
                    "label": "Andheri to BKC",
                    "origin": {"lat": 19.0, "lng": 72.85},
                    "destination": {"lat": 19.1, "lng": 72.85},
                }
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_single_cycle_writes_records(tmp_path, monkeypatch, make_provider, make_path):
    path = make_path()
    providers = [
        make_provider("google", result=ProviderSuccess(1500, 12000, encode(path))),
        make_provider("tomtom", error=ProviderFetchError("TomTom HTTP 500")),
    ]
    monkeypatch.setattr(main_module, "build_default_providers", lambda: providers)
    monkeypatch.setattr(main_module, "REFERENCE_PROVIDER", None)

    exit_code = main_module.main(
        ["--routes", str(_write_routes(tmp_path)), "--data-dir", str(tmp_path / "data"), "--once"]
    )

    assert exit_code == 0
    stored = json.loads((tmp_path / "data" / "andheri-bkc.json").read_text(encoding="utf-8"))
    assert len(stored) == 1
    assert stored[0]["google"]["durationSeconds"] == 1500
    assert stored[0]["tomtom"] == {"error": "TomTom HTTP 500"}


def test_bad_route_file_exits_non_zero(tmp_path):
    assert main_module.main(["--routes", str(tmp_path / "missing.json"), "--once"]) == 1
