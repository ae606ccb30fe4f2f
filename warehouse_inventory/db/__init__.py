# warehouse_inventory/db/__init__.py
from .connection import Database, db, create_session_factory
from .interface import InventoryStore
from .sql_store import SqlInventoryStore
from .memory_store import InMemoryInventoryStore

def initialize(connection_string=None, drop_existing=False, seed=None):
    """Initialize the database, create tables and load seed data.

    Args:
        connection_string: Optional database URL overriding configuration
        drop_existing: Drop all tables before creating them
        seed: Insert seed warehouses and zones. Defaults to configuration.

    Returns:
        SqlInventoryStore bound to the initialized database
    """
    from warehouse_inventory.config import config

    db.initialize(connection_string)
    if drop_existing:
        db.drop_all_tables()
    db.create_all_tables()

    store = SqlInventoryStore(db.session_factory)
    if seed is None:
        seed = config.inventory_config['seed_on_init']
    if seed:
        store.seed()
    return store

__all__ = [
    'db',
    'initialize',
    'create_session_factory',
    'Database',
    'InventoryStore',
    'SqlInventoryStore',
    'InMemoryInventoryStore'
]
