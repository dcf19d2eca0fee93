from __future__ import annotations

import pytest

from filestore import FileManager, Record, RecordRepository, SchemaError
from settings import Settings


class Product(Record):
    name: str
    price: float = 0.0


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def products(file_manager: FileManager, clock: FakeClock) -> RecordRepository[Product]:
    return RecordRepository(file_manager, "products.json", Product, cache_ttl=300, clock=clock)


def test_create_assigns_id_and_timestamps(products: RecordRepository[Product], file_manager: FileManager):
    p = products.create({"name": "Lamp", "price": 19.5})

    assert p.id
    assert p.createdAt == p.updatedAt
    assert p.name == "Lamp"

    on_disk = file_manager.read_json("products.json")
    assert isinstance(on_disk, list)
    assert on_disk[0]["id"] == p.id
    assert on_disk[0]["name"] == "Lamp"
    assert not file_manager.locks.is_locked("products.json")


def test_find_helpers(products: RecordRepository[Product]):
    lamp = products.create({"name": "Lamp", "price": 19.5})
    products.create({"name": "Chair", "price": 45.0})

    assert products.count() == 2
    assert products.find_by_id(lamp.id) == lamp
    assert products.find_by_id("missing") is None
    assert products.exists(lamp.id)
    assert [p.name for p in products.find_where(lambda p: p.price > 20)] == ["Chair"]
    assert products.find_one(lambda p: p.name == "Chair") is not None
    assert products.find_one(lambda p: p.name == "Desk") is None


def test_update_merges_fields(products: RecordRepository[Product]):
    lamp = products.create({"name": "Lamp", "price": 19.5})

    updated = products.update(lamp.id, {"price": 25.0, "color": "red"})
    assert updated is not None
    assert updated.id == lamp.id
    assert updated.name == "Lamp"
    assert updated.price == 25.0
    assert updated.model_extra == {"color": "red"}
    assert updated.createdAt == lamp.createdAt

    assert products.update("missing", {"price": 1.0}) is None


def test_delete_and_clear(products: RecordRepository[Product]):
    lamp = products.create({"name": "Lamp"})
    products.create({"name": "Chair"})

    assert products.delete(lamp.id) is True
    assert products.delete(lamp.id) is False
    assert products.count() == 1

    products.clear()
    assert products.find_all(use_cache=False) == []


def test_cache_expires_after_ttl(products: RecordRepository[Product], file_manager: FileManager, clock: FakeClock):
    products.create({"name": "Lamp"})
    assert products.is_cache_valid()

    # An out-of-band write is invisible until the cache expires.
    file_manager.write_json("products.json", [])
    assert products.count() == 1

    clock.now += 301
    assert not products.is_cache_valid()
    assert products.count() == 0


def test_returned_records_do_not_alias_cache(products: RecordRepository[Product]):
    products.create({"name": "Lamp"})
    first = products.find_all()
    first[0].name = "Mutated"
    first.clear()

    assert [p.name for p in products.find_all()] == ["Lamp"]


def test_clear_cache_forces_reload(products: RecordRepository[Product], file_manager: FileManager):
    products.create({"name": "Lamp"})
    file_manager.write_json("products.json", [])

    products.clear_cache()
    assert not products.is_cache_valid()
    assert products.find_all() == []


def test_get_stats(products: RecordRepository[Product]):
    stats = products.get_stats()
    assert stats.total_records == 0
    assert stats.file_exists is True
    assert stats.cache_status == "valid"

    products.create({"name": "Lamp"})
    stats = products.get_stats()
    assert stats.total_records == 1
    assert stats.file_size > 0
    assert stats.last_modified is not None


def test_object_document_is_a_schema_error(file_manager: FileManager):
    file_manager.write_json("products.json", {"not": "a list"})
    repo = RecordRepository(file_manager, "products.json", Product)

    with pytest.raises(SchemaError):
        repo.find_all()
    assert not file_manager.locks.is_locked("products.json")


def test_from_settings_uses_cache_ttl(file_manager: FileManager, clock: FakeClock):
    settings = Settings(
        data_path="data",
        backup_suffix=".backup",
        temp_suffix=".tmp",
        json_indent=2,
        cache_ttl_seconds=0,
        log_level="INFO",
    )
    repo = RecordRepository.from_settings(file_manager, "products.json", Product, settings=settings)

    repo.create({"name": "Lamp"})
    assert not repo.is_cache_valid()

    file_manager.write_json("products.json", [])
    assert repo.count() == 0


def test_integer_ids_without_timestamps(file_manager: FileManager):
    file_manager.write_json("orders.json", [{"id": 1}, {"id": 2, "total": 5}])
    repo = RecordRepository(file_manager, "orders.json", Record)

    first = repo.find_by_id(1)
    assert first is not None and first.id == 1
    assert first.createdAt is None
    assert repo.find_by_id("1") is None

    updated = repo.update(2, {"total": 7})
    assert updated is not None
    assert updated.model_extra == {"total": 7}
    assert updated.updatedAt is not None

    assert repo.delete(1) is True
    assert [r["id"] for r in file_manager.read_json("orders.json")] == [2]
