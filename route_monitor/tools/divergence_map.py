"""Render the latest poll of a route as an interactive provider overlay map."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import folium

from ..config import DATA_DIR, MAP_OUTPUT_DIR, REFERENCE_PROVIDER
from ..errors import MalformedEncodingError
from ..models import GeoPoint, PollRecord, ProviderSuccess
from ..polyline_codec import decode
from ..storage import JsonRecordStore

LatLng = Tuple[float, float]
PathLike = Union[str, Path]

_REFERENCE_COLOR = "#4285F4"
_CANDIDATE_COLOR = "#1a9641"
_DIVERGENCE_COLOR = "#d73027"
_PROVIDER_COLORS = {"google": "#4285F4", "tomtom": "#FF4757", "ola": "#2ed573"}


DecodedPath = Tuple[str, ProviderSuccess, List[GeoPoint]]


def _decoded_paths(record: PollRecord) -> List[DecodedPath]:
    """Return (provider id, result, points) for every decodable polyline."""

    paths: List[DecodedPath] = []
    for provider_id, result in record.results.items():
        if not isinstance(result, ProviderSuccess) or not result.polyline:
            continue
        try:
            points = decode(result.polyline)
        except MalformedEncodingError as exc:
            logging.warning("Skipping %s polyline: %s", provider_id, exc)
            continue
        if points:
            paths.append((provider_id, result, points))
    return paths


def _tooltip(provider_id: str, result: ProviderSuccess) -> str:
    minutes = float(result.duration_seconds) / 60.0
    km = float(result.distance_meters) / 1000.0
    text = f"{provider_id}: {minutes:.1f} min, {km:.1f} km"
    report = result.divergence
    if report is not None:
        text += (
            f" | avg deviation {report.avg_deviation_meters} m,"
            f" max {report.max_deviation_meters} m vs {report.compared_to}"
        )
    return text


def build_divergence_map(
    record: PollRecord,
    reference_provider: Optional[str] = None,
    *,
    output_html: Optional[PathLike] = None,
) -> folium.Map:
    """Create a map overlaying every provider's route from one poll record.

    Args:
        record: Poll record whose provider polylines are drawn.
        reference_provider: Provider drawn on top and used for the start/end
            markers; defaults to the record's first provider.
        output_html: Optional path where the rendered HTML map is saved.

    Returns:
        The :class:`folium.Map` instance.

    Raises:
        ValueError: If no provider in the record has a decodable polyline.
    """

    paths = _decoded_paths(record)
    if not paths:
        raise ValueError(f"Record {record.id} has no decodable provider polyline")
    reference_id = reference_provider or record.provider_ids[0]
    # Reference last so it renders above the candidates.
    paths.sort(key=lambda item: item[0] == reference_id)
    anchor = paths[-1][2]

    all_points: List[LatLng] = [p.as_tuple() for _, _, pts in paths for p in pts]
    lats = [lat for lat, _ in all_points]
    lngs = [lng for _, lng in all_points]
    folium_map = folium.Map(
        location=anchor[0].as_tuple(), zoom_start=12, control_scale=True
    )

    for provider_id, result, points in paths:
        report = result.divergence
        divergent = report is not None and report.is_different_route
        if provider_id == reference_id:
            color = _REFERENCE_COLOR
        elif divergent:
            color = _DIVERGENCE_COLOR
        else:
            color = _PROVIDER_COLORS.get(provider_id, _CANDIDATE_COLOR)
        line = folium.PolyLine(
            [p.as_tuple() for p in points],
            color=color,
            weight=6 if divergent else 5,
            opacity=0.9 if provider_id == reference_id else 0.75,
            tooltip=_tooltip(provider_id, result),
            **({"dash_array": "8"} if divergent else {}),
        )
        line.add_to(folium_map)

    folium.CircleMarker(
        location=anchor[0].as_tuple(),
        radius=8,
        color="#1c2030",
        fill=True,
        fill_color="#ffffff",
        tooltip="Origin",
    ).add_to(folium_map)
    folium.CircleMarker(
        location=anchor[-1].as_tuple(),
        radius=8,
        color="#ffffff",
        fill=True,
        fill_color=_REFERENCE_COLOR,
        tooltip="Destination",
        popup=folium.Popup(
            html=f"<strong>Poll:</strong> {record.timestamp}", max_width=300
        ),
    ).add_to(folium_map)
    folium_map.fit_bounds([(min(lats), min(lngs)), (max(lats), max(lngs))])

    if output_html is not None:
        output_path = Path(output_html)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate an HTML map of every provider route for the latest poll."
    )
    parser.add_argument("--route-id", required=True)
    parser.add_argument("--data-dir", type=Path, default=Path(DATA_DIR))
    parser.add_argument("--reference", default=REFERENCE_PROVIDER)
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional output HTML path; defaults to maps/<route-id>.html",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m route_monitor.tools.divergence_map``."""

    args = _build_parser().parse_args(argv)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )

    store = JsonRecordStore(args.data_dir)
    try:
        latest = store.read_latest(args.route_id, 1)
    except ValueError as exc:
        logging.error("%s", exc)
        return 1
    if not latest:
        logging.error("No records stored for route '%s'", args.route_id)
        return 1

    output_path = args.output or Path(MAP_OUTPUT_DIR) / f"{args.route_id}.html"
    try:
        build_divergence_map(latest[0], args.reference, output_html=output_path)
    except ValueError as exc:
        logging.error("Failed to build divergence map: %s", exc)
        return 1
    logging.info("Divergence map written to %s", output_path)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
