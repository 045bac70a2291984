import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from routeplanner.models.domain import OptimizedRoute, Segment
from routeplanner.persistence.filesystem import FileStorage
from routeplanner.persistence.saved_routes import STORAGE_FILE, SavedRouteStore


def _route(start: str = "Depot", end: str = "Depot") -> OptimizedRoute:
    return OptimizedRoute(
        segments=(
            Segment(1, start, 0, 0, 0, 0),
            Segment(2, "Kungsgatan 9", 1200, 300, 1200, 300),
            Segment(3, end, 800, 200, 2000, 500),
        ),
        total_distance=2000,
        total_duration=500,
        polyline="_p~iF~ps|U_ulLnnqC_mqNvxq`@",
        api_calls=1,
        warnings=(),
    )


def test_file_storage_writes_and_reads_json(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    path = storage.path("summary.json")

    storage.write_json(path, {"hello": "world"})

    assert path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert storage.read_json(path) == {"hello": "world"}


def test_saved_route_round_trip(tmp_path: Path) -> None:
    store = SavedRouteStore(FileStorage(root=tmp_path), max_routes=5)
    departure = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)

    saved = store.save(_route(start="Storgatan 1", end="Hamngatan 2"), departure_time=departure, route_mode="traffic")

    assert saved.id.startswith("route_")
    assert saved.start_address == "Storgatan 1"
    assert saved.end_address == "Hamngatan 2"
    assert saved.total_stops == 3
    assert saved.departure_time == int(departure.timestamp())
    loaded = store.get(saved.id)
    assert loaded == saved
    assert loaded.route.segments[-1].cumulative_distance == 2000


def test_saved_routes_are_newest_first_and_bounded(tmp_path: Path) -> None:
    store = SavedRouteStore(FileStorage(root=tmp_path), max_routes=2)

    first = store.save(_route(start="A"))
    second = store.save(_route(start="B"))
    third = store.save(_route(start="C"))

    ids = [saved.id for saved in store.list_routes()]
    assert ids == [third.id, second.id]
    assert store.get(first.id) is None


def test_delete_and_clear(tmp_path: Path) -> None:
    store = SavedRouteStore(FileStorage(root=tmp_path), max_routes=5)
    kept = store.save(_route())
    removed = store.save(_route())

    assert store.delete(removed.id) is True
    assert store.delete(removed.id) is False
    assert [saved.id for saved in store.list_routes()] == [kept.id]

    store.clear()
    assert store.list_routes() == []


def test_legacy_address_objects_are_migrated(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    path = storage.path(STORAGE_FILE)
    storage.write_json(
        path,
        [
            {
                "id": "route_1",
                "timestamp": 1,
                "route": {"segments": [], "total_distance": 0, "total_duration": 0, "polyline": "", "api_calls": 1},
                "start_address": {"value": "Storgatan 1"},
                "end_address": {},
                "total_stops": 0,
            }
        ],
    )

    routes = SavedRouteStore(storage).list_routes()

    assert routes[0].start_address == "Storgatan 1"
    assert routes[0].end_address == "Unknown"
    assert json.loads(path.read_text(encoding="utf-8"))[0]["start_address"] == "Storgatan 1"


def test_corrupt_file_is_discarded(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    path = storage.path(STORAGE_FILE)
    path.write_text("{not json", encoding="utf-8")

    store = SavedRouteStore(storage)

    assert store.list_routes() == []
    assert not path.exists()


@pytest.mark.parametrize(
    "content",
    [
        [1, 2],
        ["x"],
        [{"foo": 1}],
        [{"id": "route_1", "timestamp": 1, "route": {"segments": [{"foo": 1}]}}],
    ],
)
def test_malformed_entries_discard_the_file(tmp_path: Path, content) -> None:
    storage = FileStorage(root=tmp_path)
    path = storage.path(STORAGE_FILE)
    storage.write_json(path, content)

    store = SavedRouteStore(storage)

    assert store.list_routes() == []
    assert store.get("route_1") is None
    assert not path.exists()


def test_save_replaces_malformed_file(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    storage.write_json(storage.path(STORAGE_FILE), [1, 2])
    store = SavedRouteStore(storage)

    saved = store.save(_route())

    assert [route.id for route in store.list_routes()] == [saved.id]
