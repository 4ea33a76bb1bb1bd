"""Read-only JSON API over the stored poll records."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue

from .config import LATEST_DEFAULT_N
from .models import RouteConfig
from .storage import RecordSink
from .summary import summarize_records

LOGGER = logging.getLogger(__name__)


def _parse_n(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def create_app(
    store: RecordSink,
    routes: Sequence[RouteConfig],
    *,
    reference_provider: str = "",
) -> Flask:
    """Build the Flask app serving ``/api/routes`` and ``/api/data/...``."""

    app = Flask(__name__)
    known = {route.id: route for route in routes}

    def _unknown(route_id: str) -> ResponseReturnValue:
        return jsonify({"error": f"Unknown route '{route_id}'"}), 404

    @app.get("/api/routes")
    def list_routes() -> ResponseReturnValue:
        return jsonify([{"id": r.id, "label": r.label} for r in routes])

    @app.get("/api/data/<route_id>")
    def all_records(route_id: str) -> ResponseReturnValue:
        if route_id not in known:
            return _unknown(route_id)
        return jsonify([r.to_dict() for r in store.read_all(route_id)])

    @app.get("/api/data/<route_id>/latest")
    def latest_records(route_id: str) -> ResponseReturnValue:
        if route_id not in known:
            return _unknown(route_id)
        n = _parse_n(request.args.get("n"), LATEST_DEFAULT_N)
        return jsonify([r.to_dict() for r in store.read_latest(route_id, n)])

    @app.get("/api/data/<route_id>/summary")
    def route_summary(route_id: str) -> ResponseReturnValue:
        if route_id not in known:
            return _unknown(route_id)
        records = store.read_all(route_id)
        reference = reference_provider or (
            records[-1].provider_ids[0] if records else ""
        )
        return jsonify(summarize_records(records, reference).to_dict())

    LOGGER.debug("API created for %d route(s)", len(known))
    return app


__all__ = ["create_app"]
