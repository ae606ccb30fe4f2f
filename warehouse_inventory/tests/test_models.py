"""
Tests for entity constraints enforced by the schema and the ORM.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from warehouse_inventory.exceptions import ValidationError
from warehouse_inventory.models import Product, InventoryRecord


def test_negative_quantity_rejected_on_construction():
    with pytest.raises(ValidationError):
        InventoryRecord(product_id=1, warehouse_id=1, quantity=-1)


def test_negative_quantity_rejected_on_assignment():
    record = InventoryRecord(product_id=1, warehouse_id=1, quantity=4)
    with pytest.raises(ValidationError):
        record.quantity = -2
    assert record.quantity == 4


def test_record_key_and_dict():
    record = InventoryRecord(id=7, product_id=10, warehouse_id=1, zone_id=None, quantity=5)
    assert record.key == (10, 1, None)
    assert record.to_dict() == {
        'inventory_id': 7,
        'product_id': 10,
        'warehouse_id': 1,
        'zone_id': None,
        'quantity': 5
    }


def test_duplicate_sku_violates_unique_index(session_factory):
    session = session_factory()
    try:
        session.add(Product(name="Bolt", sku="B-1", price=1))
        session.flush()
        session.add(Product(name="Other bolt", sku="B-1", price=2))
        with pytest.raises(IntegrityError):
            session.flush()
    finally:
        session.rollback()
        session.close()


def test_zoneless_key_is_unique(sql_store):
    product_id = sql_store.create_product("Bolt", "B-1", 1)
    session = sql_store._session_factory()
    try:
        session.add(InventoryRecord(product_id=product_id, warehouse_id=1, zone_id=None, quantity=1))
        session.flush()
        session.add(InventoryRecord(product_id=product_id, warehouse_id=1, zone_id=None, quantity=2))
        with pytest.raises(IntegrityError):
            session.flush()
    finally:
        session.rollback()
        session.close()


def test_same_product_may_sit_in_several_zones(sql_store):
    product_id = sql_store.create_product("Bolt", "B-1", 1)
    sql_store.upsert_inventory(product_id, 1, None, 1)
    sql_store.upsert_inventory(product_id, 1, 1, 2)
    sql_store.upsert_inventory(product_id, 1, 2, 3)

    records = sql_store.list_product_inventory(product_id)
    assert sorted(record.zone_id or 0 for record in records) == [0, 1, 2]
