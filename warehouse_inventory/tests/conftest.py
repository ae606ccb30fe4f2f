import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from warehouse_inventory.db.connection import create_session_factory
from warehouse_inventory.db.memory_store import InMemoryInventoryStore
from warehouse_inventory.db.sql_store import SqlInventoryStore
from warehouse_inventory.models import Base
from warehouse_inventory.services.inventory_service import InventoryService


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite database shared by every session of one test."""
    engine = create_engine(
        'sqlite://',
        poolclass=StaticPool,
        connect_args={'check_same_thread': False}
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    # The factory installs the foreign key pragma, so build it before the first connection
    factory = create_session_factory(sqlite_engine)
    Base.metadata.create_all(sqlite_engine)
    return factory


@pytest.fixture
def sql_store(session_factory):
    store = SqlInventoryStore(session_factory)
    store.seed()
    return store


@pytest.fixture
def memory_store():
    return InMemoryInventoryStore()


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    """Every store implementation, so contract tests run against both."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(store):
    return InventoryService(store, enforce_zone_warehouse=False, atomic_transfers=True)


@pytest.fixture
def product_10(store):
    """Product 10 with 5 units of warehouse-level stock in warehouse 1."""
    product_id = None
    for number in range(1, 11):
        product_id = store.create_product(f"Product {number}", f"SKU-{number:03d}", 10 + number)
    assert product_id == 10
    store.upsert_inventory(product_id, 1, None, 5)
    return product_id
