# warehouse_inventory/db/memory_store.py
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type

from warehouse_inventory.db.interface import InventoryStore
from warehouse_inventory.db.seed import SEED_WAREHOUSES, SEED_ZONES
from warehouse_inventory.exceptions import ConflictError, NotFoundError, PersistenceError
from warehouse_inventory.models import Base, Product, Warehouse, StorageZone, InventoryRecord
from warehouse_inventory.utils.validation import PRICE_QUANTUM

logger = logging.getLogger(__name__)

TABLES = ('product', 'warehouse', 'storage_zone', 'inventory')

def _dict_to_model(model_class: Type[Base], data: Dict[str, Any]) -> Base:
    """Build a transient model instance from column values."""
    return model_class(**data)

def _stored_price(price) -> Decimal:
    """Price as a NUMERIC(12, 2) column would return it."""
    return Decimal(str(price)).quantize(PRICE_QUANTUM)

class InMemoryInventoryStore(InventoryStore):
    """Dictionary-backed InventoryStore used by tests and dry runs.

    Rows are kept as column dictionaries; every read builds fresh model
    instances, so callers never hold references into the store. Unique and
    foreign key constraints are checked the way the database would.
    """

    def __init__(self, seed: bool = True):
        self._tables: Dict[str, Dict[int, Dict[str, Any]]] = {name: {} for name in TABLES}
        self._sequences: Dict[str, int] = {name: 0 for name in TABLES}
        self._transaction_depth = 0
        if seed:
            self.seed()

    def _next_id(self, table: str) -> int:
        self._sequences[table] += 1
        return self._sequences[table]

    def _insert(self, table: str, row: Dict[str, Any]) -> int:
        if row.get('id') is None:
            row['id'] = self._next_id(table)
        else:
            self._sequences[table] = max(self._sequences[table], row['id'])
        self._tables[table][row['id']] = row
        return row['id']

    def _row(self, table: str, row_id: int, label: str) -> Dict[str, Any]:
        row = self._tables[table].get(row_id)
        if row is None:
            raise NotFoundError(f"{label} {row_id} not found")
        return row

    @contextmanager
    def transaction(self):
        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield self
            finally:
                self._transaction_depth -= 1
            return

        snapshot = (
            {name: {key: dict(row) for key, row in rows.items()} for name, rows in self._tables.items()},
            dict(self._sequences)
        )
        self._transaction_depth = 1
        try:
            yield self
        except Exception:
            self._tables, self._sequences = snapshot
            logger.info("Transaction rolled back")
            raise
        finally:
            self._transaction_depth = 0

    # Views

    def _product(self, row) -> Product:
        return _dict_to_model(Product, dict(row))

    def _warehouse(self, row) -> Warehouse:
        return _dict_to_model(Warehouse, dict(row))

    def _zone(self, row, with_records: bool = False) -> StorageZone:
        zone = _dict_to_model(StorageZone, dict(row))
        if with_records:
            zone.inventory_records = [
                self._record(record_row, with_relations=True)
                for record_row in self._sorted('inventory')
                if record_row['zone_id'] == row['id']
            ]
        return zone

    def _record(self, row, with_relations: bool = False) -> InventoryRecord:
        record = _dict_to_model(InventoryRecord, dict(row))
        if with_relations:
            record.product = self._product(self._tables['product'][row['product_id']])
            record.warehouse = self._warehouse(self._tables['warehouse'][row['warehouse_id']])
            if row['zone_id'] is not None:
                record.zone = self._zone(self._tables['storage_zone'][row['zone_id']])
        return record

    def _sorted(self, table: str) -> List[Dict[str, Any]]:
        return [self._tables[table][key] for key in sorted(self._tables[table])]

    # Products

    def _check_sku(self, sku: str, product_id: Optional[int] = None):
        for row in self._tables['product'].values():
            if row['sku'] == sku and row['id'] != product_id:
                raise ConflictError(f"SKU '{sku}' already exists")

    def create_product(self, name: str, sku: str, price) -> int:
        self._check_sku(sku)
        return self._insert('product', {
            'id': None,
            'name': name,
            'sku': sku,
            'price': _stored_price(price)
        })

    def get_product(self, product_id: int) -> Product:
        return self._product(self._row('product', product_id, 'Product'))

    def update_product(self, product_id: int, fields: Dict[str, Any]) -> Product:
        row = self._row('product', product_id, 'Product')
        if fields.get('sku') is not None:
            self._check_sku(fields['sku'], product_id)

        for key in ('name', 'sku', 'price'):
            if fields.get(key) is not None:
                row[key] = _stored_price(fields[key]) if key == 'price' else fields[key]
        return self._product(row)

    def delete_product(self, product_id: int) -> None:
        self._row('product', product_id, 'Product')
        inventory = self._tables['inventory']
        for inventory_id in [key for key, row in inventory.items() if row['product_id'] == product_id]:
            del inventory[inventory_id]
        del self._tables['product'][product_id]

    # Warehouses and zones

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        return self._warehouse(self._row('warehouse', warehouse_id, 'Warehouse'))

    def list_warehouses(self) -> List[Warehouse]:
        return [self._warehouse(row) for row in self._sorted('warehouse')]

    def create_zone(self, name: str, capacity: int, warehouse_id: int) -> int:
        if warehouse_id not in self._tables['warehouse']:
            raise PersistenceError(f"Cannot create zone: warehouse {warehouse_id} does not exist")
        return self._insert('storage_zone', {
            'id': None,
            'name': name,
            'capacity': capacity,
            'warehouse_id': warehouse_id
        })

    def get_zone(self, zone_id: int) -> StorageZone:
        return self._zone(self._row('storage_zone', zone_id, 'Storage zone'))

    def list_zones(self, warehouse_id: int) -> List[StorageZone]:
        return [
            self._zone(row, with_records=True)
            for row in self._sorted('storage_zone')
            if row['warehouse_id'] == warehouse_id
        ]

    # Inventory

    def list_inventory(self, warehouse_id: int) -> List[InventoryRecord]:
        return [
            self._record(row, with_relations=True)
            for row in self._sorted('inventory')
            if row['warehouse_id'] == warehouse_id
        ]

    def list_product_inventory(self, product_id: int) -> List[InventoryRecord]:
        return [
            self._record(row, with_relations=True)
            for row in self._sorted('inventory')
            if row['product_id'] == product_id
        ]

    def _find_row(self, product_id, warehouse_id, zone_id) -> Optional[Dict[str, Any]]:
        key = (product_id, warehouse_id, zone_id)
        for row in self._tables['inventory'].values():
            if (row['product_id'], row['warehouse_id'], row['zone_id']) == key:
                return row
        return None

    def find_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int] = None) -> InventoryRecord:
        row = self._find_row(product_id, warehouse_id, zone_id)
        if row is None:
            raise NotFoundError(
                f"No inventory for product {product_id} in warehouse {warehouse_id}, zone {zone_id}"
            )
        return self._record(row, with_relations=True)

    def _check_references(self, product_id, warehouse_id, zone_id):
        if product_id not in self._tables['product']:
            raise PersistenceError(f"Cannot write inventory: product {product_id} does not exist")
        if warehouse_id not in self._tables['warehouse']:
            raise PersistenceError(f"Cannot write inventory: warehouse {warehouse_id} does not exist")
        if zone_id is not None and zone_id not in self._tables['storage_zone']:
            raise PersistenceError(f"Cannot write inventory: storage zone {zone_id} does not exist")

    def upsert_inventory(self, product_id: int, warehouse_id: int, zone_id: Optional[int], quantity: int) -> int:
        # Building the model runs the quantity validator
        InventoryRecord(quantity=quantity)

        row = self._find_row(product_id, warehouse_id, zone_id)
        if row is not None:
            row['quantity'] = quantity
            return row['id']

        self._check_references(product_id, warehouse_id, zone_id)
        return self._insert('inventory', {
            'id': None,
            'product_id': product_id,
            'warehouse_id': warehouse_id,
            'zone_id': zone_id,
            'quantity': quantity
        })

    def set_inventory_quantity(self, inventory_id: int, quantity: int) -> None:
        InventoryRecord(quantity=quantity)
        row = self._row('inventory', inventory_id, 'Inventory record')
        row['quantity'] = quantity

    def seed(self) -> None:
        for row in SEED_WAREHOUSES:
            if row['id'] not in self._tables['warehouse']:
                self._insert('warehouse', dict(row))
        for row in SEED_ZONES:
            if row['id'] not in self._tables['storage_zone']:
                self._insert('storage_zone', dict(row))
