from datetime import timedelta
from pathlib import Path

import pytest

from src.location.cache import LocationCache, is_recent
from src.location.storage import InMemoryStorage, JsonFileStorage
from tests.common import NOW, FixedClock, make_fix


class _BrokenStorage(InMemoryStorage):
    def get_item(self, key: str) -> str | None:
        raise OSError("disk gone")

    def set_item(self, key: str, value: str) -> None:
        raise OSError("read-only filesystem")


def test_save_then_load_returns_fix_and_saved_at() -> None:
    clock = FixedClock()
    cache = LocationCache(InMemoryStorage(), clock=clock)
    fix = make_fix()

    cache.save(fix)
    cached = cache.load()

    assert cached is not None
    assert cached.fix == fix
    assert cached.saved_at == NOW


def test_save_overwrites_single_slot() -> None:
    storage = InMemoryStorage()
    cache = LocationCache(storage, key="slot")

    cache.save(make_fix(latitude=1.0))
    cache.save(make_fix(latitude=2.0))

    cached = cache.load()
    assert cached is not None
    assert cached.fix.latitude == 2.0


def test_load_empty_storage_returns_none() -> None:
    assert LocationCache(InMemoryStorage()).load() is None


@pytest.mark.parametrize("raw", ["{not json", '{"fix": {"source": "nowhere"}}', '"just a string"'])
def test_load_corrupt_value_returns_none(raw: str) -> None:
    storage = InMemoryStorage({"lastKnownLocation": raw})
    assert LocationCache(storage).load() is None


def test_clear_removes_slot() -> None:
    cache = LocationCache(InMemoryStorage())
    cache.save(make_fix())

    cache.clear()

    assert cache.load() is None


def test_storage_failures_are_absorbed() -> None:
    cache = LocationCache(_BrokenStorage())

    cache.save(make_fix())

    assert cache.load() is None


def test_is_recent_boundary_is_strict() -> None:
    fix = make_fix()

    assert is_recent(fix, 1_800_000, now=NOW + timedelta(milliseconds=1_799_999)) is True
    assert is_recent(fix, 1_800_000, now=NOW + timedelta(milliseconds=1_800_000)) is False


def test_is_recent_uses_cache_clock_and_default_threshold() -> None:
    clock = FixedClock()
    cache = LocationCache(InMemoryStorage(), clock=clock)
    fix = make_fix()

    clock.advance(minutes=29)
    assert cache.is_recent(fix) is True

    clock.advance(minutes=1)
    assert cache.is_recent(fix) is False


def test_is_recent_without_fix() -> None:
    assert is_recent(None) is False


def test_json_file_storage_survives_new_instance(tmp_path: Path) -> None:
    path = tmp_path / "state" / "location.json"
    LocationCache(JsonFileStorage(path)).save(make_fix())

    cached = LocationCache(JsonFileStorage(path)).load()

    assert cached is not None
    assert cached.fix.latitude == pytest.approx(28.5355)


def test_json_file_storage_treats_garbage_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "location.json"
    path.write_text("garbage", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get_item("lastKnownLocation") is None

    storage.set_item("lastKnownLocation", "value")
    assert storage.get_item("lastKnownLocation") == "value"

    storage.remove_item("lastKnownLocation")
    assert storage.get_item("lastKnownLocation") is None
