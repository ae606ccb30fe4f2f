"""
Contract tests run against every InventoryStore implementation.
"""
import threading
from decimal import Decimal

import pytest
from sqlalchemy import create_engine

from warehouse_inventory.db.connection import create_session_factory
from warehouse_inventory.db.seed import SEED_WAREHOUSES, SEED_ZONES
from warehouse_inventory.db.sql_store import SqlInventoryStore
from warehouse_inventory.exceptions import (
    ConflictError, NotFoundError, PersistenceError, ValidationError
)
from warehouse_inventory.models import Base


def test_seed_data_present(store):
    warehouses = store.list_warehouses()
    assert [(w.id, w.location) for w in warehouses] == [(row['id'], row['location']) for row in SEED_WAREHOUSES]

    zones = store.list_zones(1)
    assert [(z.id, z.name, z.capacity) for z in zones] == [
        (row['id'], row['name'], row['capacity']) for row in SEED_ZONES
    ]
    assert store.list_zones(2) == []


def test_seed_is_idempotent(store):
    store.seed()
    assert len(store.list_warehouses()) == 2
    assert len(store.list_zones(1)) == 2


def test_create_and_get_product(store):
    product_id = store.create_product("Widget", "W-1", Decimal("4.25"))
    product = store.get_product(product_id)

    assert product.id == product_id
    assert product.name == "Widget"
    assert product.sku == "W-1"
    assert Decimal(str(product.price)) == Decimal("4.25")


def test_duplicate_sku_conflicts(store):
    store.create_product("Widget", "W-1", 1)
    with pytest.raises(ConflictError):
        store.create_product("Other", "W-1", 2)


def test_get_missing_product(store):
    with pytest.raises(NotFoundError):
        store.get_product(999)


def test_update_product(store):
    product_id = store.create_product("Widget", "W-1", 1)
    store.create_product("Gadget", "G-1", 2)

    updated = store.update_product(product_id, {'name': "Widget XL", 'sku': None, 'price': Decimal("3")})
    assert updated.name == "Widget XL"
    assert updated.sku == "W-1"

    with pytest.raises(ConflictError):
        store.update_product(product_id, {'sku': "G-1"})
    with pytest.raises(NotFoundError):
        store.update_product(999, {'name': "x"})

    assert store.get_product(product_id).sku == "W-1"


def test_delete_product_removes_its_records(store):
    product_id = store.create_product("Widget", "W-1", 1)
    store.upsert_inventory(product_id, 1, None, 0)

    store.delete_product(product_id)

    with pytest.raises(NotFoundError):
        store.get_product(product_id)
    assert store.list_product_inventory(product_id) == []
    with pytest.raises(NotFoundError):
        store.delete_product(product_id)


def test_create_zone(store):
    zone_id = store.create_zone("Rack B1", 40, 2)
    zone = store.get_zone(zone_id)

    assert zone.warehouse_id == 2
    assert [z.id for z in store.list_zones(2)] == [zone_id]


def test_create_zone_in_missing_warehouse_fails(store):
    with pytest.raises(PersistenceError):
        store.create_zone("Nowhere", 10, 99)


def test_find_inventory_matches_exact_zone(store):
    product_id = store.create_product("Widget", "W-1", 1)
    store.upsert_inventory(product_id, 1, 1, 7)

    with pytest.raises(NotFoundError):
        store.find_inventory(product_id, 1, None)

    record = store.find_inventory(product_id, 1, 1)
    assert record.quantity == 7
    assert record.product.sku == "W-1"
    assert record.warehouse.location == "Warehouse A"
    assert record.zone.name == "Cold Room 1"


def test_upsert_creates_then_overwrites(store):
    product_id = store.create_product("Widget", "W-1", 1)

    first = store.upsert_inventory(product_id, 2, None, 3)
    second = store.upsert_inventory(product_id, 2, None, 8)

    assert first == second
    assert store.find_inventory(product_id, 2, None).quantity == 8
    assert len(store.list_inventory(2)) == 1


def test_upsert_rejects_unknown_product(store):
    with pytest.raises(PersistenceError):
        store.upsert_inventory(999, 1, None, 3)


def test_set_inventory_quantity(store):
    product_id = store.create_product("Widget", "W-1", 1)
    inventory_id = store.upsert_inventory(product_id, 1, None, 3)

    store.set_inventory_quantity(inventory_id, 0)
    assert store.find_inventory(product_id, 1, None).quantity == 0

    with pytest.raises(ValidationError):
        store.set_inventory_quantity(inventory_id, -1)
    with pytest.raises(NotFoundError):
        store.set_inventory_quantity(999, 1)


def test_list_zones_includes_records(store):
    product_id = store.create_product("Widget", "W-1", 1)
    store.upsert_inventory(product_id, 1, 2, 11)

    zones = {zone.id: zone for zone in store.list_zones(1)}
    assert zones[1].inventory_records == []
    assert [(r.product.name, r.quantity) for r in zones[2].inventory_records] == [("Widget", 11)]


def test_returned_entities_are_snapshots(store):
    product_id = store.create_product("Widget", "W-1", 1)
    store.upsert_inventory(product_id, 1, None, 3)

    record = store.find_inventory(product_id, 1, None)
    record.quantity = 100

    assert store.find_inventory(product_id, 1, None).quantity == 3


def test_transaction_commits(store):
    product_id = store.create_product("Widget", "W-1", 1)

    with store.transaction():
        store.upsert_inventory(product_id, 1, None, 3)
        store.upsert_inventory(product_id, 2, None, 4)

    assert store.find_inventory(product_id, 1, None).quantity == 3
    assert store.find_inventory(product_id, 2, None).quantity == 4


def test_transaction_rolls_back_every_write(store):
    product_id = store.create_product("Widget", "W-1", 1)
    inventory_id = store.upsert_inventory(product_id, 1, None, 3)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.set_inventory_quantity(inventory_id, 1)
            store.upsert_inventory(product_id, 2, None, 2)
            with store.transaction():
                store.create_product("Gadget", "G-1", 1)
            raise RuntimeError("boom")

    assert store.find_inventory(product_id, 1, None).quantity == 3
    with pytest.raises(NotFoundError):
        store.find_inventory(product_id, 2, None)
    with pytest.raises(ConflictError):
        store.create_product("Widget again", "W-1", 1)
    # The rolled back product left its SKU free
    store.create_product("Gadget", "G-1", 1)


def test_create_product_keeps_two_decimal_places(store):
    product_id = store.create_product("Widget", "W-1", Decimal("9.9"))
    assert str(store.get_product(product_id).price) == "9.90"


@pytest.fixture
def file_store(tmp_path):
    """SQL store over a file database, so each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'inventory.db'}",
        connect_args={'check_same_thread': False}
    )
    factory = create_session_factory(engine)
    Base.metadata.create_all(engine)
    store = SqlInventoryStore(factory)
    store.seed()
    yield store
    engine.dispose()


def test_transaction_is_private_to_its_thread(file_store):
    product_id = file_store.create_product("Widget", "W-1", 1)
    inventory_id = file_store.upsert_inventory(product_id, 1, None, 5)

    opened = threading.Event()
    written = threading.Event()
    errors = []

    def abort_transaction():
        try:
            with file_store.transaction():
                file_store.get_product(product_id)
                opened.set()
                written.wait(timeout=5)
                raise RuntimeError("abort")
        except RuntimeError:
            pass

    def write_outside_transaction():
        opened.wait(timeout=5)
        try:
            file_store.set_inventory_quantity(inventory_id, 42)
        except Exception as e:
            errors.append(e)
        finally:
            written.set()

    threads = [threading.Thread(target=abort_transaction), threading.Thread(target=write_outside_transaction)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert file_store.find_inventory(product_id, 1, None).quantity == 42
