"""Append-only per-route record storage.

Each route owns one JSON file holding an array of poll records, oldest first.
An append reads the whole file, adds one record and atomically replaces the
file. The store assumes a single writer process.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, List, Optional, Protocol, Union

from .config import DATA_DIR
from .errors import SinkError
from .models import PollRecord

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

ROUTE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class RecordSink(Protocol):
    """Persistence contract consumed by the poller and the read API."""

    def append(self, route_id: str, record: PollRecord) -> None: ...

    def read_all(self, route_id: str) -> List[PollRecord]: ...

    def read_latest(self, route_id: str, n: int) -> List[PollRecord]: ...


def validate_route_id(route_id: str) -> str:
    """Return ``route_id`` when it is safe to use as a file name."""

    if not isinstance(route_id, str) or not ROUTE_ID_PATTERN.match(route_id):
        raise ValueError(f"Invalid route id {route_id!r}")
    return route_id


class JsonRecordStore:
    """Stores poll records as ``<base_dir>/<route_id>.json`` arrays."""

    def __init__(self, base_dir: PathLike = DATA_DIR) -> None:
        base = Path(base_dir)
        self._base_dir = base if base.is_absolute() else Path.cwd() / base
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _file_path(self, route_id: str) -> Path:
        return self._base_dir / f"{validate_route_id(route_id)}.json"

    def _load_raw(self, path: Path) -> Optional[List[Any]]:
        """Return the stored array, ``[]`` when absent, ``None`` when unreadable."""

        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            _LOGGER.error("Failed reading record file %s: %s", path, exc)
            return None
        if not isinstance(payload, list):
            _LOGGER.error("Record file %s does not hold a JSON array", path)
            return None
        return payload

    def _write_file(self, path: Path, payload: List[Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=True, indent=2)
            temp_path.replace(path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def append(self, route_id: str, record: PollRecord) -> None:
        """Append ``record`` to the route's file.

        Raises:
            SinkError: If the existing file is unreadable or the write fails.
                An unreadable file is left untouched.
        """

        path = self._file_path(route_id)
        with self._lock:
            existing = self._load_raw(path)
            if existing is None:
                raise SinkError(f"Refusing to overwrite unreadable record file {path}")
            existing.append(record.to_dict())
            try:
                self._write_file(path, existing)
            except (OSError, TypeError, ValueError) as exc:
                raise SinkError(f"Failed writing record file {path}: {exc}") from exc
        _LOGGER.debug("Appended record id=%s route=%s", record.id, route_id)

    def read_all(self, route_id: str) -> List[PollRecord]:
        """Return every stored record for the route, oldest first."""

        path = self._file_path(route_id)
        with self._lock:
            raw = self._load_raw(path) or []
        records: List[PollRecord] = []
        for index, item in enumerate(raw):
            try:
                records.append(PollRecord.from_dict(item))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                _LOGGER.warning(
                    "Skipping malformed record %d in %s: %s", index, path, exc
                )
        return records

    def read_latest(self, route_id: str, n: int) -> List[PollRecord]:
        """Return the last ``n`` records, oldest first."""

        if n <= 0:
            return []
        return self.read_all(route_id)[-n:]


__all__ = ["JsonRecordStore", "RecordSink", "ROUTE_ID_PATTERN", "validate_route_id"]
