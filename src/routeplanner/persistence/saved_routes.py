"""Most-recent-first store of saved routes kept in a JSON file."""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from ..config import settings
from ..models.domain import OptimizedRoute, SavedRoute
from ..services.outputs.routing_formatter import optimized_route_from_json, optimized_route_to_json
from .filesystem import FileStorage

STORAGE_FILE = "saved_routes.json"
REQUIRED_KEYS = ("id", "timestamp", "route")

logger = logging.getLogger(__name__)


def _address_text(value: Any, fallback: str) -> str:
    # Older entries stored the whole stop object instead of its text.
    if isinstance(value, dict):
        value = value.get("value")
    return value if isinstance(value, str) and value else fallback


def _is_record(record: Any) -> bool:
    return (
        isinstance(record, dict)
        and all(key in record for key in REQUIRED_KEYS)
        and isinstance(record["id"], str)
        and isinstance(record["route"], dict)
    )


def _to_record(saved: SavedRoute) -> dict:
    return {
        "id": saved.id,
        "timestamp": saved.timestamp,
        "route": optimized_route_to_json(saved.route),
        "start_address": saved.start_address,
        "end_address": saved.end_address,
        "total_stops": saved.total_stops,
        "departure_time": saved.departure_time,
        "route_mode": saved.route_mode,
    }


def _from_record(record: dict) -> SavedRoute:
    return SavedRoute(
        id=record["id"],
        timestamp=record["timestamp"],
        route=optimized_route_from_json(record.get("route") or {}),
        start_address=record["start_address"],
        end_address=record["end_address"],
        total_stops=record.get("total_stops", 0),
        departure_time=record.get("departure_time"),
        route_mode=record.get("route_mode"),
    )


class SavedRouteStore:
    def __init__(self, storage: FileStorage | None = None, max_routes: int | None = None) -> None:
        self.storage = storage or FileStorage()
        self.max_routes = max_routes or settings.max_saved_routes
        self.path = self.storage.path(STORAGE_FILE)

    def _discard(self, reason: str) -> list[dict]:
        logger.error(f"Saved routes file {self.path} {reason}, discarding it")
        self.path.unlink(missing_ok=True)
        return []

    def _load_records(self) -> list[dict]:
        """Read the stored records, migrating legacy entries.

        A file that cannot be parsed, or that holds anything other than a list
        of route records, is removed and treated as empty.
        """
        if not self.path.exists():
            return []
        try:
            records = self.storage.read_json(self.path)
        except (OSError, ValueError) as exc:
            return self._discard(f"is unreadable ({exc})")
        if not isinstance(records, list):
            return self._discard("does not hold a list")
        if not all(_is_record(record) for record in records):
            return self._discard("holds malformed entries")

        migrated = False
        for record in records:
            for key, fallback in (("start_address", "Unknown"), ("end_address", "Unknown")):
                if not isinstance(record.get(key), str):
                    record[key] = _address_text(record.get(key), fallback)
                    migrated = True
        try:
            for record in records:
                _from_record(record)
        except (KeyError, TypeError, ValueError) as exc:
            return self._discard(f"holds an unreadable route ({exc!r})")

        if migrated:
            self.storage.write_json(self.path, records)
            logger.info("Migrated saved routes to the current format")
        return records

    def list_routes(self) -> list[SavedRoute]:
        return [_from_record(record) for record in self._load_records()]

    def get(self, route_id: str) -> Optional[SavedRoute]:
        for record in self._load_records():
            if record.get("id") == route_id:
                return _from_record(record)
        return None

    def save(
        self,
        route: OptimizedRoute,
        *,
        departure_time: datetime | None = None,
        route_mode: Literal["standard", "traffic"] | None = None,
    ) -> SavedRoute:
        timestamp = int(time.time() * 1000)
        segments = route.segments
        saved = SavedRoute(
            id=f"route_{timestamp}_{uuid.uuid4().hex[:6]}",
            timestamp=timestamp,
            route=route,
            start_address=segments[0].address if segments else "Start",
            end_address=segments[-1].address if segments else "End",
            total_stops=len(segments),
            departure_time=int(departure_time.timestamp()) if departure_time else None,
            route_mode=route_mode,
        )
        records = [_to_record(saved), *self._load_records()][: self.max_routes]
        self.storage.write_json(self.path, records)
        logger.info(f"Saved route {saved.id}")
        return saved

    def delete(self, route_id: str) -> bool:
        records = self._load_records()
        remaining = [record for record in records if record.get("id") != route_id]
        if len(remaining) == len(records):
            return False
        self.storage.write_json(self.path, remaining)
        logger.info(f"Deleted saved route {route_id}")
        return True

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.info("Cleared all saved routes")
