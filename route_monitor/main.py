import argparse
import logging
from typing import Optional, Sequence

from werkzeug.serving import make_server

from .api import create_app
from .config import (
    DATA_DIR,
    POLL_INTERVAL_MS,
    PORT,
    REFERENCE_PROVIDER,
    ROUTES_FILE,
    SERVER_HOST,
)
from .errors import RouteConfigError
from .poller import PollerConfig, PollScheduler, PollService
from .providers import build_default_providers
from .route_config import load_routes
from .storage import JsonRecordStore


def _setup_logging() -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Poll routing providers on a schedule and serve the records."
    )
    parser.add_argument("--routes", default=ROUTES_FILE, help="Route config JSON")
    parser.add_argument("--data-dir", default=DATA_DIR, help="Record directory")
    parser.add_argument(
        "--once", action="store_true", help="Run a single poll cycle and exit"
    )
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Poll on schedule without starting the HTTP API",
    )
    parser.add_argument("--port", type=int, default=PORT)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    _setup_logging()
    args = _build_parser().parse_args(argv)

    try:
        routes = load_routes(args.routes)
    except RouteConfigError as exc:
        logging.error("Failed to load routes '%s': %s", args.routes, exc)
        return 1

    store = JsonRecordStore(args.data_dir)
    service = PollService(
        PollerConfig(
            providers=build_default_providers(),
            sink=store,
            reference_provider=REFERENCE_PROVIDER,
        )
    )
    logging.info(
        "Providers: %s (reference: %s)",
        ", ".join(service.provider_ids),
        service.reference_provider,
    )

    if args.once:
        records = service.poll_once(routes)
        logging.info("Single cycle finished: %d/%d saved", len(records), len(routes))
        return 0 if len(records) == len(routes) else 1

    scheduler = PollScheduler(service, routes, interval_ms=POLL_INTERVAL_MS)
    logging.info("Poll interval: %ss", POLL_INTERVAL_MS / 1000)
    if args.no_server:
        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            logging.info("Interrupted; shutting down")
        return 0

    app = create_app(store, routes, reference_provider=service.reference_provider)
    server = make_server(SERVER_HOST, args.port, app, threaded=True)
    scheduler.start()
    logging.info("API running at http://%s:%s", SERVER_HOST, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logging.info("Interrupted; shutting down")
    finally:
        server.shutdown()
        scheduler.stop(timeout=5)
    return 0
